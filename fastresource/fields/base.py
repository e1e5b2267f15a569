# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import inspect
import re

from typing import TYPE_CHECKING, Any, Callable, ClassVar

from fastresource.fields.enums import Capability, FieldContext, FieldType, RelationKind
from fastresource.fields.rules import Nullable, Required, Rule

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.persist.operation import PersistOperation


class _NotSet:
    def __repr__(self) -> str:
        return "NOT_SET"

    def __bool__(self) -> bool:
        return False


NOT_SET: Any = _NotSet()


Visibility = bool | Callable[["ResourceContext | None", Any], bool]
DefaultProvider = Callable[["ResourceContext | None", Any], Any]


def snake_case(value: str) -> str:
    value = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", value.strip())

    return re.sub(r"[\s\-]+", "_", value).lower()


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value

    return value


class Field:
    """
    Descriptor of one piece of data of a resource.

    A field knows how to read its value from an entity (``resolve``), how to
    write the submitted input onto an entity (``fill``), which rules the
    input must pass (``get_validation_rules``) and in which contexts it is
    shown (``is_visible_for``). Fields are built per request and are never
    persisted.

    Example:
        ```python
        Text("Title", required=True, max_length=255)
        Text("Slug", readonly=True, show_on_create=False)
        Number("Reading time", computed=True, display_using=lambda value, post: len(post.body or "") // 1000)
        ```
    """

    field_type: ClassVar[FieldType] = FieldType.TEXT
    default_component: ClassVar[str] = "field-text"
    capabilities: ClassVar[frozenset[Capability]] = frozenset({Capability.RESOLVE, Capability.FILL})
    relation_kind: ClassVar[RelationKind | None] = None

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        *,
        component: str | None = None,
        readonly: bool | Callable[["ResourceContext | None"], bool] = False,
        disabled: bool = False,
        computed: bool = False,
        required: bool = False,
        nullable: bool = False,
        rules: list[Rule] | None = None,
        default: Any = NOT_SET,
        default_from: str | None = None,
        default_when: Callable[["ResourceContext | None", Any], bool] | None = None,
        display_using: Callable[[Any, Any], Any] | None = None,
        resolve_using: Callable[[Any], Any] | None = None,
        fill_using: Callable[["ResourceContext", Any, str, Any], Any] | None = None,
        show_on_index: Visibility = True,
        show_on_detail: Visibility = True,
        show_on_create: Visibility = True,
        show_on_update: Visibility = True,
        sortable: bool = False,
        help_text: str | None = None,
    ):
        self.name = name
        self.attribute = snake_case(name) if attribute is None else attribute
        self.component = component or self.default_component
        self.readonly = readonly
        self.disabled = disabled
        self.required = required
        self.nullable = nullable
        self.rules: list[Rule] = list(rules or [])
        self.default = default
        self.default_from = default_from
        self.default_when = default_when
        self.display_using = display_using
        self.resolve_using = resolve_using
        self.fill_using = fill_using
        self.computed = computed or display_using is not None or resolve_using is not None
        self.sortable = sortable
        self.help_text = help_text
        self.visibility: dict[FieldContext, Visibility] = {
            FieldContext.INDEX: show_on_index,
            FieldContext.DETAIL: show_on_detail,
            FieldContext.CREATE: show_on_create,
            FieldContext.UPDATE: show_on_update,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, key={self.key!r})"

    @property
    def key(self) -> str:
        """Key of the field in the submitted input and in the resolved output."""
        return self.attribute

    @property
    def type(self) -> FieldType:
        return self.field_type

    def has_capability(self, capability: Capability) -> bool:
        return capability in self.capabilities

    # Visibility

    def is_visible_for(
        self,
        flag: FieldContext,
        context: "ResourceContext | None" = None,
        entity: Any = None,
    ) -> bool:
        if self.computed and flag in (FieldContext.CREATE, FieldContext.UPDATE):
            return False

        visible = self.visibility[flag]

        if callable(visible):
            return bool(visible(context, entity))

        return bool(visible)

    def show_on(self, *flags: FieldContext) -> "Field":
        for flag in flags:
            self.visibility[flag] = True

        return self

    def hide_from(self, *flags: FieldContext) -> "Field":
        for flag in flags:
            self.visibility[flag] = False

        return self

    def only_on(self, *flags: FieldContext) -> "Field":
        for flag in FieldContext:
            self.visibility[flag] = flag in flags

        return self

    def is_readonly(self, context: "ResourceContext | None" = None) -> bool:
        if callable(self.readonly):
            return bool(self.readonly(context))

        return bool(self.readonly)

    def is_computed(self) -> bool:
        return self.computed

    # Resolve

    async def resolve(self, context: "ResourceContext | None", entity: Any) -> Any:
        """Read the display value of the field, absent data resolves to ``None``."""
        if self.resolve_using is not None:
            value = await maybe_await(self.resolve_using(entity))
        else:
            value = self.get_raw_value(entity)

            if value is None:
                value = await self.resolve_default(context, entity)

        if self.display_using is not None:
            value = await maybe_await(self.display_using(value, entity))

        return self.format_value(value)

    def get_raw_value(self, entity: Any) -> Any:
        if entity is None or not self.attribute:
            return None

        return getattr(entity, self.attribute, None)

    def format_value(self, value: Any) -> Any:
        return value

    # Default value

    def has_default(self) -> bool:
        return self.default is not NOT_SET or self.default_from is not None

    async def resolve_default(self, context: "ResourceContext | None", entity: Any) -> Any:
        if not self.has_default():
            return None

        if self.default_when is not None and not self.default_when(context, entity):
            return None

        if self.default_from is not None:
            value: Any = entity

            for part in self.default_from.split("."):
                value = getattr(value, part, None)

                if value is None:
                    break

            return await maybe_await(value)

        if callable(self.default):
            return await maybe_await(self.default(context, entity))

        return self.default

    # Fill

    def can_fill(self, context: "ResourceContext | None" = None) -> bool:
        return (
            self.has_capability(Capability.FILL)
            and not self.computed
            and not self.disabled
            and not self.is_readonly(context)
        )

    async def fill(self, context: "ResourceContext", entity: Any) -> None:
        """Copy the validated input of the field onto the entity."""
        if not self.can_fill(context) or not context.submitted(self.key):
            return

        value = context.value(self.key)

        if value is None and self.has_default():
            value = await self.resolve_default(context, entity)

        value = self.prepare_for_storage(value)

        if self.fill_using is not None:
            await maybe_await(self.fill_using(context, entity, self.attribute, value))
            return

        setattr(entity, self.attribute, value)

    def prepare_for_storage(self, value: Any) -> Any:
        return value

    # Lifecycle hooks

    async def before_save(self, context: "ResourceContext", entity: Any, operation: "PersistOperation") -> None:
        pass

    def supports_after_save(self) -> bool:
        return self.has_capability(Capability.AFTER_SAVE)

    async def after_save(self, context: "ResourceContext", entity: Any) -> None:
        pass

    # Validation

    def get_validation_rules(self) -> list[Rule]:
        rules: list[Rule] = []

        if self.required:
            rules.append(Required())

        if self.nullable or not self.required:
            rules.append(Nullable())

        rules.extend(self.get_type_rules())
        rules.extend(self.rules)

        return rules

    def get_type_rules(self) -> list[Rule]:
        return []

    def get_rules_map(self) -> dict[str, list[Rule]]:
        """Rules keyed by every input key the field consumes."""
        if self.computed:
            return {}

        return {self.key: self.get_validation_rules()}

    def with_rules(self, *rules: Rule) -> "Field":
        self.rules.extend(rules)

        return self


__all__ = [
    "NOT_SET",
    "Visibility",
    "DefaultProvider",
    "Field",
    "snake_case",
    "maybe_await",
]
