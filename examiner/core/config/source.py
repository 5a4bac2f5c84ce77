import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import examiner.lib.util as util
from examiner.model import DeploymentEnvironment

SkipKeys = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


def overlay_paths(root: p.AnyUrl, env: DeploymentEnvironment) -> list[Path]:
    """Directories searched for YAML files, in increasing precedence"""
    assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
    paths = [Path(root.path)]
    if env is not DeploymentEnvironment.Local:
        # local/ has no directory of its own, it is the root
        paths.append(Path(root.path) / "env.d" / env.value)
    return paths


class SettingsSource(PydanticBaseSettingsSource):
    def __call__(self) -> dict[str, t.Any]:
        # init kwargs carry the config root and env
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e
            except Exception as e:
                raise SettingsError(f"error getting value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class OverrideSettingsSource(SettingsSource):
    """`-o dotted.path=value` pairs from the command line; values are parsed as YAML"""

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for o in current_state["override"]:
            k, v = [s.strip() for s in o.split("=", 1)]

            target = od
            *parents, key = k.split(".")
            for parent in parents:
                target = target.setdefault(parent, {})
            target[key] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # this source precedes the YAML source, so pydantic-settings deep-merges
        # these partial values over the files
        if field_name in SkipKeys or field_name not in self.parsed_options:
            raise KeyError(field_name)
        val = self.parsed_options[field_name]
        return val, field_name, isinstance(val, dict)


class YAMLCascadingSettingsSource(SettingsSource):
    """
    Load `<field>.yaml` for each field; a file under env.d/<env>/ replaces the
    one at the config root
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(CurrentState, self.current_state)
        return overlay_paths(current_state["root"], current_state["env"])

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        yamls: list[str] = []
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                yamls.append(fn.read_text(encoding="utf8"))
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not value_is_complex:
            return super().prepare_field_value(field_name, field, value, value_is_complex)
        if not isinstance(value, list):
            raise ValueError(field_name)
        yamls = t.cast(list[str], value)
        return yaml.safe_load(yamls[-1])


class YAMLSecretsSource(SettingsSource):
    """Plain `secrets.yaml` beside the environment's configuration, if present"""

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        rs: dict[str, t.Any] = {}
        for path in overlay_paths(current_state["root"], current_state["env"]):
            fn = path / "secrets.yaml"
            if fn.exists():
                rs = util.deep_update(rs, yaml.safe_load(fn.read_text(encoding="utf8")) or {})
        return rs

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # skip before touching self.secrets, which needs root from current_state
        if field_name in SkipKeys or field_name not in self.secrets:
            raise KeyError(field_name)
        val = self.secrets[field_name]
        return val, field_name, isinstance(val, dict)
