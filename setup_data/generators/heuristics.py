"""Name-pattern rules and type fallbacks for synthesized field values.

``NAME_RULES`` is evaluated top to bottom and the first rule whose kinds and
predicate match produces the value. ``TYPE_FALLBACKS`` covers every field the
table does not recognize.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Tuple

from setup_data.generators.random_stream import RandomStream, format_date, format_datetime
from setup_data.schema.types import FieldDefinition, FieldKind

STRING = frozenset({FieldKind.STRING})
NUMERIC = frozenset({FieldKind.INTEGER, FieldKind.NUMBER})
BOOLEAN = frozenset({FieldKind.BOOLEAN})
DATES = frozenset({FieldKind.DATE_TIME, FieldKind.DATE})
ANY_KIND: FrozenSet[FieldKind] = frozenset()

PERSON_ENTITIES = {"user", "customer", "employee", "person", "member", "contact", "patient", "author"}
COMPANY_ENTITIES = {"company", "supplier", "manufacturer", "vendor", "organization", "brand"}

WORD_REGEX = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
ALPHANUMERIC = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


def split_words(name: str) -> Tuple[str, ...]:
    """``ShippingAddressLine1`` -> ``("shipping", "address", "line", "1")``."""
    return tuple(w.lower() for w in WORD_REGEX.findall(name))


@dataclass(frozen=True)
class RuleInput:
    name: str
    words: Tuple[str, ...]
    field: FieldDefinition
    entity_name: str
    is_key: bool = False

    @property
    def lower(self) -> str:
        return self.name.lower()

    def has(self, *words: str) -> bool:
        return any(w in self.words for w in words)


@dataclass(frozen=True)
class NameRule:
    label: str
    kinds: FrozenSet[FieldKind]
    matches: Callable[[RuleInput], bool]
    generate: Callable[[RuleInput, RandomStream, Any], Any]

    def applies(self, rule_input: RuleInput) -> bool:
        if self.kinds and rule_input.field.kind not in self.kinds:
            return False
        return self.matches(rule_input)


def generic_string(stream: RandomStream, max_length: int | None = None) -> str:
    """Short lorem text, no longer than ``max_length`` (capped at 20)."""
    length = min(max_length, 20) if max_length else 10
    words = stream.faker.words(nb=max(1, length // 5))
    return " ".join(words)[:length]


def bounded_number(field_def: FieldDefinition, stream: RandomStream, low, high, digits: int = 2):
    """Draw a number in [low, high]; schema ``minimum``/``maximum`` win over the defaults."""
    low = field_def.raw.get("minimum", low)
    high = field_def.raw.get("maximum", high)
    if high < low:
        high = low
    if field_def.kind == FieldKind.INTEGER:
        return stream.randint(int(low), int(high))
    return stream.uniform(low, high, digits)


def format_moment(field_def: FieldDefinition, moment) -> str:
    if field_def.kind == FieldKind.DATE or field_def.format == "date":
        return format_date(moment)
    return format_datetime(moment)


def _identifier(rule_input: RuleInput, stream: RandomStream, context) -> Any:
    field_def = rule_input.field
    if field_def.kind == FieldKind.STRING:
        return stream.faker.uuid4()
    if context is not None and context.assign_ids:
        return context.record_index + 1
    # Assigned by the storage engine
    return None


def _entity_name(rule_input: RuleInput, stream: RandomStream, context) -> str:
    entity = rule_input.entity_name.lower()
    if entity in PERSON_ENTITIES and not rule_input.has("user", "username"):
        return stream.faker.name()
    if entity in COMPANY_ENTITIES or rule_input.has("company", "manufacturer", "supplier"):
        return stream.faker.company()
    if rule_input.has("user", "username"):
        return stream.faker.user_name()
    if entity == "product" or rule_input.has("product"):
        return " ".join(w.capitalize() for w in stream.faker.words(nb=2))
    return stream.faker.word().capitalize()


def _code(prefix: str, size: int):
    def generate(rule_input: RuleInput, stream: RandomStream, context) -> str:
        return prefix + stream.faker.bothify("?" * size, letters=ALPHANUMERIC)
    return generate


def _number(low, high, digits: int = 2):
    def generate(rule_input: RuleInput, stream: RandomStream, context):
        return bounded_number(rule_input.field, stream, low, high, digits)
    return generate


def _moment(days_before: int, days_after: int = 0):
    def generate(rule_input: RuleInput, stream: RandomStream, context) -> str:
        return format_moment(rule_input.field, stream.datetime_between(days_before, days_after))
    return generate


def _is_flag(rule_input: RuleInput) -> bool:
    return re.match(r"^(?:[Ii]s|[Hh]as|[Rr]equires|[Cc]an)(?=[A-Z_]|$)", rule_input.name) is not None


NAME_RULES: Tuple[NameRule, ...] = (
    NameRule("identifier", ANY_KIND, lambda r: r.is_key or r.lower == "id", _identifier),
    # People and organizations
    NameRule("first name", STRING, lambda r: r.has("first") and r.has("name"),
             lambda r, s, c: s.faker.first_name()),
    NameRule("last name", STRING, lambda r: r.has("last", "sur") and r.has("name") or r.has("surname"),
             lambda r, s, c: s.faker.last_name()),
    NameRule("full name", STRING, lambda r: r.has("full") and r.has("name"),
             lambda r, s, c: s.faker.name()),
    NameRule("name", STRING, lambda r: r.has("name", "title", "username"), _entity_name),
    NameRule("manufacturer", STRING, lambda r: r.has("manufacturer", "company", "supplier"),
             lambda r, s, c: s.faker.company()),
    # Contact details
    NameRule("email", STRING, lambda r: r.has("email", "mail"), lambda r, s, c: s.faker.email().lower()),
    NameRule("phone", STRING, lambda r: r.has("phone", "mobile", "fax"), lambda r, s, c: s.faker.phone_number()),
    NameRule("address", STRING, lambda r: r.has("address", "street"), lambda r, s, c: s.faker.street_address()),
    NameRule("city", STRING, lambda r: r.has("city"), lambda r, s, c: s.faker.city()),
    NameRule("country", STRING, lambda r: r.has("country"), lambda r, s, c: s.faker.country()),
    NameRule("postal code", STRING, lambda r: r.has("postal", "zip", "postcode"), lambda r, s, c: s.faker.postcode()),
    # Free text
    NameRule("description", STRING, lambda r: r.has("description", "summary", "bio"),
             lambda r, s, c: s.faker.paragraph()),
    NameRule("notes", STRING, lambda r: r.has("notes", "note", "comments", "comment", "remarks"),
             lambda r, s, c: " ".join(s.faker.sentences(nb=2))),
    # Identifiers and media
    NameRule("image", STRING, lambda r: r.has("image", "photo", "avatar", "picture", "thumbnail"),
             lambda r, s, c: s.faker.image_url()),
    NameRule("url", STRING, lambda r: r.has("url", "website", "link", "uri"), lambda r, s, c: s.faker.url()),
    NameRule("color", STRING, lambda r: r.has("color", "colour"), lambda r, s, c: s.faker.color_name()),
    NameRule("password", STRING, lambda r: r.has("password"), lambda r, s, c: s.faker.password(length=12)),
    NameRule("sku", STRING, lambda r: r.has("sku"), _code("", 8)),
    NameRule("barcode", STRING, lambda r: r.has("barcode", "ean", "upc"), lambda r, s, c: s.faker.ean13()),
    NameRule("batch", STRING, lambda r: r.has("batch", "lot"), _code("BATCH-", 6)),
    NameRule("uuid", STRING, lambda r: r.has("uuid", "guid"), lambda r, s, c: s.faker.uuid4()),
    NameRule("date text", STRING, lambda r: r.has("date", "at") and not r.field.max_length, _moment(365)),
    # Money
    NameRule("price", NUMERIC, lambda r: r.has("price", "cost"), _number(1, 1000)),
    NameRule("amount", NUMERIC, lambda r: r.has("amount", "total", "balance", "salary"), _number(0, 10000)),
    NameRule("discount", NUMERIC, lambda r: r.has("discount"), _number(0, 20)),
    NameRule("tax", NUMERIC, lambda r: r.has("tax", "vat"), _number(0, 10)),
    # Counts and measures
    NameRule("quantity", NUMERIC, lambda r: r.has("quantity", "qty", "stock", "count"), _number(1, 100)),
    NameRule("minimum", NUMERIC, lambda r: r.has("min", "minimum"), _number(1, 10)),
    NameRule("maximum", NUMERIC, lambda r: r.has("max", "maximum"), _number(50, 200)),
    NameRule("age", NUMERIC, lambda r: r.has("age"), _number(18, 90)),
    NameRule("rating", NUMERIC, lambda r: r.has("rating", "score"), _number(0, 5, 1)),
    NameRule("percentage", NUMERIC, lambda r: r.has("percentage", "percent", "rate"), _number(0, 100)),
    # Flags
    NameRule("flag", BOOLEAN, _is_flag, lambda r, s, c: s.boolean()),
    # Dates
    NameRule("created", DATES, lambda r: r.has("created", "create", "registered", "joined"), _moment(365)),
    NameRule("updated", DATES, lambda r: r.has("updated", "update", "modified", "changed"), _moment(30)),
    NameRule("birth", DATES, lambda r: r.has("birth", "birthdate", "birthday", "dob"), _moment(80 * 365, -18 * 365)),
    NameRule("expiry", DATES, lambda r: r.has("expiry", "expires", "expiration", "due"), _moment(0, 730)),
)


def match_name_rule(rule_input: RuleInput):
    for rule in NAME_RULES:
        if rule.applies(rule_input):
            return rule
    return None


def _string_fallback(field_def: FieldDefinition, stream: RandomStream) -> Any:
    if field_def.format == "uuid":
        return stream.faker.uuid4()
    if field_def.format == "email":
        return stream.faker.email().lower()
    if field_def.format in ("date-time", "date"):
        return format_moment(field_def, stream.datetime_between(30))
    return generic_string(stream, field_def.max_length)


def _object_fallback(field_def: FieldDefinition, stream: RandomStream) -> Any:
    if field_def.base_type == "object":
        return {}
    return generic_string(stream, 10)


TYPE_FALLBACKS = {
    FieldKind.STRING: _string_fallback,
    FieldKind.INTEGER: lambda f, s: bounded_number(f, s, 1, 1000),
    FieldKind.NUMBER: lambda f, s: bounded_number(f, s, 0, 1000),
    FieldKind.BOOLEAN: lambda f, s: s.boolean(),
    FieldKind.DATE_TIME: lambda f, s: format_moment(f, s.datetime_between(30)),
    FieldKind.DATE: lambda f, s: format_moment(f, s.datetime_between(30)),
    FieldKind.ARRAY: lambda f, s: [],
    FieldKind.OBJECT: _object_fallback,
}


def type_fallback(field_def: FieldDefinition, stream: RandomStream) -> Any:
    generate = TYPE_FALLBACKS.get(field_def.kind)
    if generate is None:
        return generic_string(stream, 10)
    return generate(field_def, stream)
