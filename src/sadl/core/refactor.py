"""
Model refactorings.
"""

import logging

from . import ir
from .errors import ModelError
from .model import Model

logger = logging.getLogger(__name__)


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def convert_inline_enums(model: Model) -> Model:
    """
    Hoist inline Enum struct fields into top-level types.

    Each inline Enum becomes a TypeDef named after the capitalized field name
    and the field refers to it by name. An existing type of that name is
    reused if it is equivalent; otherwise the refactoring fails. Inline
    structs nested in a field are searched as well.

    Returns:
        A new Model; the input model is not modified

    Raises:
        ModelError: If a hoisted name collides with a different type
    """
    hoisted: dict[str, ir.TypeDef] = {}

    def claim(name: str, spec: ir.EnumSpec, owner: str) -> None:
        previous = hoisted.get(name) or model.find_type(name)
        if previous is None:
            hoisted[name] = ir.TypeDef(name=name, spec=spec)
            logger.debug(f"Hoisted inline enum {owner} to type {name}")
            return
        if not model.equivalent_types(previous.spec, spec):
            raise ModelError(
                f"Cannot refactor, duplicate type names for non-equivalent types: "
                f"{name} and the inline enum of {owner}"
            )

    def convert_struct(spec: ir.StructSpec, owner: str) -> ir.StructSpec:
        fields = []
        for f in spec.fields:
            path = f"{owner}.{f.name}"
            if isinstance(f.spec, ir.EnumSpec):
                name = _capitalize(f.name)
                claim(name, f.spec, path)
                f = f.model_copy(update={"spec": ir.RefSpec(type=name)})
            elif isinstance(f.spec, ir.StructSpec):
                f = f.model_copy(update={"spec": convert_struct(f.spec, path)})
            fields.append(f)
        return spec.model_copy(update={"fields": fields})

    types = []
    for td in model.types:
        if isinstance(td.spec, ir.StructSpec):
            td = td.model_copy(update={"spec": convert_struct(td.spec, td.name)})
        types.append(td)
    types.extend(hoisted.values())

    schema = model.schema.model_copy(update={"types": types})
    return Model(schema, extensions=model.extensions)
