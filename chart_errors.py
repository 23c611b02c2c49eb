"""
Error types raised by the bubble chart renderer.
Each error carries a machine-readable status so callers can map it to a response.
"""

from typing import Any, Dict, Optional


class ChartError(Exception):
    """Base class for every failure raised while building a chart."""

    status = 500
    title = "Chart Error"
    default_message = "An error occurred while generating the chart."

    def __init__(self, message: Optional[str] = None, stage: Optional[str] = None):
        self.message = message or self.default_message
        self.stage = stage
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.stage:
            return f"{self.title} [{self.stage}]: {self.message}"
        return f"{self.title}: {self.message}"

    @property
    def exit_code(self) -> int:
        """Process exit code for command-line callers (4 for client, 5 for server errors)."""
        return self.status // 100

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation of the failure."""
        data = {
            "status": self.status,
            "error": self.title,
            "message": self.message,
        }
        if self.stage:
            data["stage"] = self.stage
        if self.__cause__ is not None:
            data["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return data


class ChartConfigurationError(ChartError, ValueError):
    """Missing or malformed chart configuration (fatal for the render call)."""

    status = 400
    title = "Configuration Error"
    default_message = "The chart configuration is invalid."


class ChartValidationError(ChartConfigurationError):
    """Raw chart options could not be parsed into a configuration."""

    title = "Validation Error"
    default_message = "The provided data is invalid."


class MetricsProviderError(ChartError, RuntimeError):
    """The text measurement provider failed to initialize or respond."""

    status = 503
    title = "Dependency Error"
    default_message = "The text measurement provider is unavailable."


class ChartFetchError(ChartError):
    """Chart input could not be loaded."""

    title = "Fetch Error"
    default_message = "An error occurred while fetching data."


class ChartRenderingError(ChartError, RuntimeError):
    """Unexpected failure while composing one section of the chart."""

    title = "Rendering Error"
    default_message = "An error occurred while generating the SVG."
