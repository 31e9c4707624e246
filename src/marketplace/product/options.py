"""Option declarations and variant option maps.

A product declares its axes of variation as an ordered list of
``{"name": ..., "values": [...]}``. Each variant carries a map of option name
to the chosen value. Maps are stored unordered; comparisons go through
``canonical_options``, which sorts by key.
"""


def canonical_options(options):
    """Sorted ``(name, value)`` pairs for an option map; empty tuple for none."""
    if not options:
        return ()
    return tuple(sorted((str(name), str(value)) for name, value in options.items()))


def declared_option_names(declarations):
    return [decl["name"] for decl in declarations or []]


def duplicate_combinations(variant_options):
    """Return the canonical forms that appear more than once, in first-seen order."""
    seen = set()
    duplicates = []
    for options in variant_options:
        key = canonical_options(options)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def undeclared_option_names(declarations, options):
    """Option names used by a variant that the product does not declare."""
    declared = set(declared_option_names(declarations))
    return sorted(name for name in (options or {}) if name not in declared)


def describe_combination(key):
    return ", ".join(f"{name}={value}" for name, value in key)


def clean_option_declarations(declarations):
    """Drop options with a blank name or without a single non-blank value.

    Names and values are stripped; value order is kept and blanks removed.
    """
    cleaned = []
    for decl in declarations or []:
        name = (decl.get("name") or "").strip()
        values = [str(v).strip() for v in decl.get("values") or [] if str(v).strip()]
        if not name or not values:
            continue
        cleaned.append({"name": name, "values": values})
    return cleaned


def clean_variant_payloads(variants):
    """Drop variants whose option map is empty after cleaning, or with negative stock."""
    cleaned = []
    for variant in variants or []:
        options = {
            str(name).strip(): str(value).strip()
            for name, value in (variant.get("options") or {}).items()
            if str(name).strip() and str(value).strip()
        }
        if not options:
            continue
        if (variant.get("stock") or 0) < 0:
            continue
        cleaned.append({**variant, "options": options})
    return cleaned
