import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

from fluentmark.model import DeploymentEnvironment

# passed in as init kwargs, never read from files
BOOT_KEYS = frozenset({"env", "root", "override"})


class BootState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]
    override: tuple[str, ...]


class SettingsSource(PydanticBaseSettingsSource):
    """Collects one value per settings field from :meth:`lookup`.

    Subclasses raise :class:`KeyError` from ``lookup`` when they have nothing
    to say about a field; any other error is reported as a
    :class:`SettingsError` naming the field.
    """

    @property
    def boot(self) -> BootState:
        return t.cast(BootState, self.current_state)

    def lookup(self, field_name: str) -> t.Any:
        raise NotImplementedError

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in BOOT_KEYS:
            raise KeyError(field_name)
        value = self.lookup(field_name)
        return value, field_name, isinstance(value, dict)

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            try:
                value, key, _ = self.get_field_value(field, field_name)
            except KeyError:
                continue
            except (ValueError, yaml.YAMLError) as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e
            except Exception as e:
                raise SettingsError(f"error getting value for field {field_name!r} from source {self!r}") from e
            data[key] = value
        return data


class OverrideSettingsSource(SettingsSource):
    """Settings given on the command line as ``dotted.path=value`` pairs.

    Values are parsed as YAML, so ``-o evaluation.max_workers=4`` yields an int.
    Only overridden fields are returned; pydantic-settings deep-merges them
    over the lower-priority sources.
    """

    @functools.cached_property
    def overrides(self) -> dict[str, t.Any]:
        tree: dict[str, t.Any] = {}
        for item in self.boot.get("override", ()):
            path, sep, raw = item.partition("=")
            if not sep:
                raise ValueError(f"override must be of the form key=value: {item!r}")

            *parents, leaf = path.strip().split(".")
            node = tree
            for name in parents:
                node = node.setdefault(name, {})
            node[leaf] = yaml.safe_load(raw.strip())
        return tree

    def lookup(self, field_name: str) -> t.Any:
        return self.overrides[field_name]


class YAMLCascadingSettingsSource(SettingsSource):
    """One ``<field>.yaml`` per settings field, looked up in the config root and
    then in ``env.d/<env>/``; the most specific file wins outright."""

    @functools.cached_property
    def search_path(self) -> tuple[Path, ...]:
        root = self.boot["root"]
        if root.scheme != "file" or root.path is None:
            raise ValueError(f"config root must be a file:// URL, got {root}")
        env = self.boot["env"]
        base = Path(root.path)
        # local has no env.d directory of its own
        if env is DeploymentEnvironment.Local:
            return (base,)
        return base, base / "env.d" / env.value

    def lookup(self, field_name: str) -> t.Any:
        found = [p / f"{field_name}.yaml" for p in self.search_path if (p / f"{field_name}.yaml").exists()]
        if not found:
            raise KeyError(field_name)
        return yaml.safe_load(found[-1].read_text(encoding="utf8"))
