import pathlib

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Object, Provider, ThreadSafeSingleton

import fluentmark.lib.json

from ..di import NotReady


def provide_text_env(template_path: str, root_path: pathlib.Path | NotReady) -> jinja2.Environment:
    """Provide the Jinja2 environment for plain-text templates such as feedback narratives.

    No autoescaping; block tags do not leave blank lines behind.
    """
    if isinstance(root_path, NotReady):
        raise RuntimeError("root path is unavailable")

    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(root_path.joinpath(template_path)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )
    env.policies.update({
        "json.dumps_function": fluentmark.lib.json.dumps,
    })
    return env


class TemplateContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    root: Provider[pathlib.Path | NotReady] = Object()

    text: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_text_env, config.path, root)
