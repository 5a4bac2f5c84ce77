import pathlib

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, ThreadSafeSingleton

from examiner.core import di


class TemplateContainer(DeclarativeContainer):
    @staticmethod
    @di.inject
    def provide_llm_env(template_path: str, root_path: pathlib.Path = di.Provide["root"]) -> jinja2.Environment:
        """Provide Jinja2 environment for assessor prompt templates.

        Prompts are plain text, so there is no autoescaping; an undefined
        variable is an error rather than an empty string.
        """
        import examiner.lib.json

        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(root_path.joinpath(template_path)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        env.policies.update({
            "json.dumps_function": examiner.lib.json.dumps,
        })
        return env

    config: Configuration = Configuration(strict=True)
    llm: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_llm_env, config.llm_path)
