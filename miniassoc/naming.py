"""Inflection helpers used to derive key, alias and accessor names."""
import re

IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
    "ox": "oxen",
}

UNCOUNTABLE = {"data", "deer", "equipment", "fish", "information", "money", "news", "rice", "series", "sheep", "species"}

PLURAL_RULES = [
    (r"(quiz)$", r"\1zes"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(octop|vir)us$", r"\1i"),
    (r"(alias|status|bus)$", r"\1es"),
    (r"(ax|test)is$", r"\1es"),
    (r"(x|ch|ss|sh|zz)$", r"\1es"),
    (r"([^aeiouy])y$", r"\1ies"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])um$", r"\1a"),
    (r"s$", "s"),
    (r"$", "s"),
]

SINGULAR_RULES = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(octop|vir)i$", r"\1us"),
    (r"(alias|status|bus)(es)?$", r"\1"),
    (r"(analy|ba|diagno|parenthe|progno|synop|the)ses$", r"\1sis"),
    (r"(ax|test)es$", r"\1is"),
    (r"(x|ch|ss|sh|zz)es$", r"\1"),
    (r"([^aeiouy])ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"([^f])ves$", r"\1fe"),
    (r"([ti])a$", r"\1um"),
    (r"(ss|us|is)$", r"\1"),
    (r"s$", ""),
]


def _word_boundary(word, suffix):
    """True if `suffix` ends `word` as a whole word or a CamelCase part."""
    if not word.lower().endswith(suffix):
        return False
    start = len(word) - len(suffix)
    return start == 0 or word[start].isupper() or not word[start - 1].isalpha()


def _match_case(replacement, original):
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _inflect(word, irregular, rules):
    if not word:
        return word
    for uncountable in UNCOUNTABLE:
        if _word_boundary(word, uncountable):
            return word
    for source, replacement in irregular.items():
        if _word_boundary(word, source):
            start = len(word) - len(source)
            return word[:start] + _match_case(replacement, word[start:])
    for pattern, replacement in rules:
        if re.search(pattern, word, flags=re.IGNORECASE):
            return re.sub(pattern, replacement, word, count=1, flags=re.IGNORECASE)
    return word


def pluralize(word):
    return _inflect(word, IRREGULAR, PLURAL_RULES)


def singularize(word):
    return _inflect(word, {plural: single for single, plural in IRREGULAR.items()}, SINGULAR_RULES)


def camelize(value):
    """`Father_id` -> `FatherId`, `user_id` -> `userId`. The first letter keeps its case."""
    return re.sub(r"[-_\s]+(.)?", lambda m: m.group(1).upper() if m.group(1) else "", value.strip())


def underscore(value):
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    value = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", value)
    return value.replace("-", "_").lower()


def upper_first(value):
    return value[:1].upper() + value[1:]


def key_name(prefix, key, underscored=False):
    """Default foreign key name: `<prefix><Key>`, snake-cased for underscored entities."""
    name = camelize(f"{prefix}_{key}")
    return underscore(name) if underscored else name


def accessor_name(action, name):
    return f"{action}{upper_first(name)}"
