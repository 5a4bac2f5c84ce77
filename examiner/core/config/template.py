from .base import BaseSettings


class TemplateSettings(BaseSettings):
    # relative to the project root
    llm_path: str = "examiner/templates/llm"
