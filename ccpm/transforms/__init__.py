from typing import Dict, Type

from ccpm.models.transform import BaseTransform as _BaseTransform

from .minify import LuaMinifyTransform  # noqa

TRANSFORMS: Dict[str, Type[_BaseTransform]] = {
    LuaMinifyTransform.name: LuaMinifyTransform,
}


def get_transform(name: str) -> _BaseTransform:
    """
    Returns a new instance of the transform registered under the given name.

    :raises KeyError: If no transform has that name.
    """
    return TRANSFORMS[name]()
