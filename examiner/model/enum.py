import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Sandbox = "sandbox"
    Test = "test"
    Local = "local"


class Difficulty(enum.Enum):
    Easy = "easy"
    Medium = "medium"
    Hard = "hard"


class PromptVariant(enum.Enum):
    """Grading strictness; every variant asks for the same JSON result"""

    Strict = "strict"
    Standard = "standard"
    Lenient = "lenient"
