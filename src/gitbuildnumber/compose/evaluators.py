"""Expression evaluators for composing a custom build number."""

import json
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import structlog
from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from gitbuildnumber.errors import ConfigurationError, FormatEvaluationError

logger = structlog.get_logger(__name__)


class BaseExpressionEvaluator(ABC):
    """Abstract base class for build number expression evaluators.

    Every extracted property is exposed to the expression as a string
    variable named like the property (``branch``, ``commitsCount``, ...).
    """

    name: str = "base"

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the engine so the first evaluate() call is fast.

        Raises:
            FormatEvaluationError: If the engine is not available
        """
        pass

    @abstractmethod
    def evaluate(self, expression: str, bindings: Mapping[str, str]) -> str:
        """Evaluate an expression against the extracted properties.

        Args:
            expression: Expression in the engine's syntax
            bindings: Property name to value

        Returns:
            The string value of the expression

        Raises:
            FormatEvaluationError: If evaluation fails or yields no value
        """
        pass


class JinjaExpressionEvaluator(BaseExpressionEvaluator):
    """Evaluates Jinja2 expressions in a sandboxed environment.

    Example:
        branch ~ "." ~ commitsCount ~ ("-" ~ dirty if dirty else "")
    """

    name = "jinja"

    def __init__(self) -> None:
        self._env: Optional[SandboxedEnvironment] = None

    def initialize(self) -> None:
        if self._env is None:
            self._env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)

    def evaluate(self, expression: str, bindings: Mapping[str, str]) -> str:
        self.initialize()
        try:
            compiled = self._env.compile_expression(expression, undefined_to_none=True)
            result = compiled(**dict(bindings))
        except Exception as e:
            raise FormatEvaluationError(f"Cannot evaluate build number expression {expression!r}: {e}") from e

        if result is None:
            raise FormatEvaluationError(f"Build number expression yields no value: {expression!r}")
        return str(result)


# Reads the bindings as JSON from stdin and evaluates argv[1] with them as globals
_NODE_SCRIPT = """
const vm = require('vm');
const fs = require('fs');
const bindings = JSON.parse(fs.readFileSync(0, 'utf8'));
const result = vm.runInNewContext(process.argv[1], bindings);
if (result === undefined || result === null) process.exit(3);
process.stdout.write(String(result));
"""


class NodeExpressionEvaluator(BaseExpressionEvaluator):
    """Evaluates JavaScript expressions with an external ``node`` process.

    JavaScript is what the JVM build tool plugins accept, e.g.
    ``branch + "." + commitsCount + (dirty.length > 0 ? "-" + dirty : "")``.
    """

    name = "node"

    def __init__(self, executable: str = "node", timeout: float = 30.0) -> None:
        self.executable = executable
        self.timeout = timeout
        self._path: Optional[str] = None

    def initialize(self) -> None:
        if self._path is not None:
            return
        path = shutil.which(self.executable)
        if path is None:
            raise FormatEvaluationError(f"JavaScript engine not found: {self.executable}")
        try:
            # first start loads node from disk
            subprocess.run([path, "--version"], capture_output=True, text=True, timeout=self.timeout, check=True)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            raise FormatEvaluationError(f"JavaScript engine not usable: {path}: {e}") from e
        self._path = path

    def evaluate(self, expression: str, bindings: Mapping[str, str]) -> str:
        self.initialize()
        cmd = [self._path, "-e", _NODE_SCRIPT, expression]
        try:
            result = subprocess.run(
                cmd,
                input=json.dumps(dict(bindings)),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            if e.returncode == 3:
                raise FormatEvaluationError(f"Build number expression yields no value: {expression!r}") from e
            logger.error("javascript_evaluation_failed", stderr=e.stderr)
            raise FormatEvaluationError(f"Cannot evaluate build number expression {expression!r}: {e.stderr.strip()}") from e
        except (subprocess.TimeoutExpired, OSError) as e:
            raise FormatEvaluationError(f"Cannot evaluate build number expression {expression!r}: {e}") from e
        return result.stdout


class DisabledExpressionEvaluator(BaseExpressionEvaluator):
    """Evaluator for environments without an expression engine."""

    name = "disabled"

    def initialize(self) -> None:
        raise FormatEvaluationError("Build number expressions are disabled")

    def evaluate(self, expression: str, bindings: Mapping[str, str]) -> str:
        raise FormatEvaluationError("Build number expressions are disabled")


EVALUATORS: Dict[str, Any] = {
    JinjaExpressionEvaluator.name: JinjaExpressionEvaluator,
    NodeExpressionEvaluator.name: NodeExpressionEvaluator,
    DisabledExpressionEvaluator.name: DisabledExpressionEvaluator,
}


def create_evaluator(engine: str) -> BaseExpressionEvaluator:
    """Create an (uninitialized) evaluator by engine name.

    Raises:
        ConfigurationError: If the engine name is unknown
    """
    try:
        return EVALUATORS[engine]()
    except KeyError as e:
        raise ConfigurationError(f"Unknown build number engine: {engine} (known: {', '.join(EVALUATORS)})") from e
