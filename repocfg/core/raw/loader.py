"""
Loader YAML de atlantis.yaml.

Sobre SafeLoader con dos diferencias:
  - una clave repetida en un mismo mapping es error (no gana la última)
  - los escalares int/float recuerdan su texto literal, para que
    `terraform_version: 0.10` llegue como "0.10" y no como "0.1"
"""

from typing import Any

import yaml
from yaml.constructor import ConstructorError, SafeConstructor

MERGE_TAG = "tag:yaml.org,2002:merge"


class YamlInt(int):
    """int decodificado de YAML; `yaml_text` es el texto tal como se escribió."""
    yaml_text: str


class YamlFloat(float):
    """float decodificado de YAML; `yaml_text` es el texto tal como se escribió."""
    yaml_text: str


def scalar_text(value: Any) -> Any:
    """Texto literal de un escalar numérico; cualquier otro valor pasa igual."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return getattr(value, "yaml_text", str(value))
    return value


def plain_int(value: Any) -> Any:
    """YamlInt -> int, para que los campos enteros estrictos lo acepten."""
    if type(value) is YamlInt:
        return int(value)
    return value


class ManifestLoader(yaml.SafeLoader):

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                # las claves traídas con '<<' se pueden sobrescribir
                if key_node.tag == MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicated = key in seen
                except TypeError:
                    # clave no hashable: SafeConstructor ya la reporta
                    continue
                if duplicated:
                    raise ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _construct_int(loader, node):
    value = YamlInt(SafeConstructor.construct_yaml_int(loader, node))
    value.yaml_text = node.value
    return value


def _construct_float(loader, node):
    value = YamlFloat(SafeConstructor.construct_yaml_float(loader, node))
    value.yaml_text = node.value
    return value


ManifestLoader.add_constructor("tag:yaml.org,2002:int", _construct_int)
ManifestLoader.add_constructor("tag:yaml.org,2002:float", _construct_float)


def load(config_data: bytes) -> Any:
    """Como yaml.safe_load, con las reglas de ManifestLoader."""
    return yaml.load(config_data, Loader=ManifestLoader)
