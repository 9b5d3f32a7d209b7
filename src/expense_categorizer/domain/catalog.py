"""
Static category configuration.

The Rule Catalog drives the generic matcher (keywords, a plausible amount range
and a typical amount per category). The description keyword table is a second,
independent keyword list used only for free-text descriptions.

Both are immutable and are passed to the matchers that need them, so a
localized table can be swapped in without touching module state. Declaration
order matters: it is the tie-break order whenever two categories score equally.
"""
import json
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


def _clean_keywords(keywords: Iterable[str]) -> tuple[str, ...]:
    cleaned: list[str] = []
    seen = set()
    for keyword in keywords:
        value = str(keyword).lower().strip()
        if value and value not in seen:
            cleaned.append(value)
            seen.add(value)
    return tuple(cleaned)


@dataclass(frozen=True)
class AmountRange:
    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min < 0 or self.max <= self.min:
            raise ValueError(f"Invalid amount range: min={self.min}, max={self.max}")

    def contains(self, amount: float) -> bool:
        return self.min <= amount <= self.max

    @property
    def size(self) -> float:
        return self.max - self.min


@dataclass(frozen=True)
class CategoryRule:
    category: str
    keywords: tuple[str, ...]
    amount_range: AmountRange
    typical_amount: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", _clean_keywords(self.keywords))


@dataclass(frozen=True)
class RuleCatalog:
    rules: tuple[CategoryRule, ...]
    _index: dict[str, CategoryRule] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        rules = tuple(self.rules)
        if not rules:
            raise ValueError("Rule catalog must declare at least one category")
        index: dict[str, CategoryRule] = {}
        for rule in rules:
            if rule.category in index:
                raise ValueError(f"Duplicate category in rule catalog: {rule.category}")
            index[rule.category] = rule
        object.__setattr__(self, "rules", rules)
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[CategoryRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(rule.category for rule in self.rules)

    def get(self, category: str) -> CategoryRule | None:
        return self._index.get(category)


@dataclass(frozen=True)
class KeywordGroup:
    category: str
    keywords: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", _clean_keywords(self.keywords))


@dataclass(frozen=True)
class KeywordTable:
    groups: tuple[KeywordGroup, ...]

    def __post_init__(self) -> None:
        groups = tuple(self.groups)
        categories = [group.category for group in groups]
        if len(set(categories)) != len(categories):
            raise ValueError("Duplicate category in keyword table")
        object.__setattr__(self, "groups", groups)

    def __iter__(self) -> Iterator[KeywordGroup]:
        return iter(self.groups)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(group.category for group in self.groups)


def _rule(category: str, keywords: Iterable[str], low: float, high: float, typical: float) -> CategoryRule:
    return CategoryRule(
        category=category,
        keywords=tuple(keywords),
        amount_range=AmountRange(min=low, max=high),
        typical_amount=typical,
    )


DEFAULT_RULE_CATALOG = RuleCatalog(rules=(
    _rule("groceries", (
        "whole foods", "trader joes", "safeway", "kroger", "albertsons",
        "costco", "walmart", "target", "aldi", "sprouts", "fresh market",
        "grocery", "groceries", "supermarket", "market", "food store",
        "produce", "organic", "farmers market",
    ), 20, 300, 60),
    _rule("food", (
        "starbucks", "coffee", "cafe", "restaurant", "bistro", "grill",
        "pizza", "burger", "taco", "sushi", "diner", "bakery",
        "mcdonalds", "subway", "chipotle", "panera", "wendys",
        "dunkin", "donut", "breakfast", "lunch", "dinner",
        "kitchen", "bar", "pub", "tavern", "eatery", "dining",
    ), 3, 150, 15),
    _rule("transport", (
        "shell", "chevron", "bp", "exxon", "mobil", "texaco", "gas",
        "gasoline", "fuel", "petrol", "station",
        "uber", "lyft", "taxi", "ride", "transit", "metro", "bus",
        "parking", "garage", "toll", "auto", "car",
    ), 5, 100, 45),
    _rule("home", (
        "home depot", "lowes", "ace hardware", "hardware",
        "ikea", "furniture", "bed bath", "wayfair",
        "paint", "lumber", "tools", "renovation", "improvement",
        "garden", "lawn", "plumbing", "electrical", "fixture",
    ), 20, 500, 100),
    _rule("fun", (
        "amc", "theater", "theatre", "cinema", "movie", "film",
        "netflix", "hulu", "spotify", "entertainment", "streaming",
        "game", "gaming", "playstation", "xbox", "steam",
        "concert", "ticket", "museum", "park", "zoo",
        "golf", "bowling", "arcade", "hobby", "sport",
    ), 5, 200, 30),
))

DEFAULT_DESCRIPTION_KEYWORDS = KeywordTable(groups=(
    KeywordGroup("groceries", (
        "grocery", "groceries", "produce", "vegetables", "fruits",
        "food", "milk", "eggs", "bread",
    )),
    KeywordGroup("food", (
        "coffee", "breakfast", "lunch", "dinner", "restaurant",
        "cafe", "burger", "pizza", "sushi", "meal",
    )),
    KeywordGroup("transport", (
        "gas", "gasoline", "fuel", "uber", "lyft", "ride",
        "taxi", "parking", "transit", "car",
    )),
    KeywordGroup("home", (
        "hardware", "furniture", "paint", "home", "house",
        "renovation", "repair", "fixture", "garden", "lawn",
    )),
    KeywordGroup("fun", (
        "movie", "theater", "game", "entertainment", "ticket",
        "concert", "sport", "hobby", "museum",
    )),
))


def _require_number(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number, got {value!r}")
    return float(value)


def _require_keywords(value: Any, label: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{label} must be a list of strings")
    return value


def rule_catalog_from_mapping(data: Mapping[str, Any]) -> RuleCatalog:
    """
    Build a catalog from ``{category: {keywords, amount_range: {min, max},
    typical_amount}}``. Mapping order becomes the tie-break order.
    """
    if not isinstance(data, Mapping):
        raise ValueError("Rule catalog must be a mapping of category -> rule")

    rules: list[CategoryRule] = []
    for category, entry in data.items():
        if not isinstance(entry, Mapping):
            raise ValueError(f"Rule for '{category}' must be a mapping")
        amount_range = entry.get("amount_range")
        if not isinstance(amount_range, Mapping):
            raise ValueError(f"Rule for '{category}' is missing amount_range")
        rules.append(_rule(
            str(category),
            _require_keywords(entry.get("keywords"), f"{category}.keywords"),
            _require_number(amount_range.get("min"), f"{category}.amount_range.min"),
            _require_number(amount_range.get("max"), f"{category}.amount_range.max"),
            _require_number(entry.get("typical_amount"), f"{category}.typical_amount"),
        ))
    return RuleCatalog(rules=tuple(rules))


def keyword_table_from_mapping(data: Mapping[str, Any]) -> KeywordTable:
    if not isinstance(data, Mapping):
        raise ValueError("Keyword table must be a mapping of category -> keywords")
    return KeywordTable(groups=tuple(
        KeywordGroup(str(category), tuple(_require_keywords(keywords, f"{category}")))
        for category, keywords in data.items()
    ))


def _read_json(path: str) -> Any:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def load_rule_catalog(path: str) -> RuleCatalog:
    return rule_catalog_from_mapping(_read_json(path))


def load_keyword_table(path: str) -> KeywordTable:
    return keyword_table_from_mapping(_read_json(path))
