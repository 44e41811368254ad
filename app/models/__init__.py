from app.models.template import Template, TemplateVersion

__all__ = ["Template", "TemplateVersion"]
