"""Service-level errors surfaced to API callers."""


class MaterializationError(Exception):
    """A batch insert stopped before every activity was written.

    Chunks committed before the failure stay in place, so `created` may be
    anywhere between 0 and `total`.
    """

    def __init__(self, created: int, total: int, cause: Exception = None):
        self.created = created
        self.total = total
        self.cause = cause
        super().__init__(self.message)

    @property
    def partial(self) -> bool:
        return self.created > 0

    @property
    def message(self) -> str:
        if self.partial:
            return f"Created {self.created} of {self.total} activities"
        return "Failed to create activities"


class TemplateNotFoundError(Exception):
    """A preset entry references a template the user cannot see."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template {template_id} not found")
