"""Domain errors raised by the template services.

Routers translate these into HTTP responses; every message is safe to show
to an end user.
"""


class ContractBuilderError(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TemplateNotFound(ContractBuilderError):
    def __init__(self, template_id: str):
        super().__init__(f"Template '{template_id}' not found")
        self.template_id = template_id


class ValidationFailed(ContractBuilderError):
    """Caller-supplied variable values do not fit the template's schema."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors) or "Invalid variable values")
        self.errors = errors


class CompileFailed(ContractBuilderError):
    """The Typst compiler could not produce a PDF."""


class CompileTimeout(CompileFailed):
    """The Typst compiler did not finish within the configured timeout."""
