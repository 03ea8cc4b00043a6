from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RuleExample:
    bad: str
    good: str | None = None
    notes: str | None = None


EXAMPLES: dict[str, RuleExample] = {
    "no-magic-number": RuleExample(
        bad="setTimeout(blastOff, 86400000);\n",
        good=(
            "const MILLISECONDS_PER_DAY = 60 * 60 * 24 * 1000;\n"
            "setTimeout(blastOff, MILLISECONDS_PER_DAY);\n"
        ),
        notes="Numbers inside array and object literals are left alone by default.",
    ),
    "no-single-letter-identifier": RuleExample(
        bad="locations.forEach(l => {\n  dispatch(l);\n});\n",
        good="locations.forEach(location => {\n  dispatch(location);\n});\n",
        notes="`i`, `j` and `k` stay allowed as counters in classic `for` loops.",
    ),
    "prefer-default-parameter": RuleExample(
        bad='function createMicrobrewery(name) {\n  name = name || "Hipster Brew Co.";\n}\n',
        good='function createMicrobrewery(name = "Hipster Brew Co.") {\n  // ...\n}\n',
        notes="`||` also replaces falsy values such as 0, '' and false.",
    ),
    "prefer-explanatory-variable": RuleExample(
        bad=(
            "saveCityZipCode(\n"
            "  address.match(cityZipCodeRegex)[1],\n"
            "  address.match(cityZipCodeRegex)[2]\n"
            ");\n"
        ),
        good=(
            "const [_, city, zipCode] = address.match(cityZipCodeRegex) || [];\n"
            "saveCityZipCode(city, zipCode);\n"
        ),
    ),
    "no-commented-out-code": RuleExample(
        bad="doStuff();\n// doOtherStuff();\n// doSomeMoreStuff();\n",
        good="doStuff();\n",
    ),
    "no-journal-comment": RuleExample(
        bad=(
            "/**\n"
            " * 2016-12-20: Removed monads, didn't understand them (RM)\n"
            " * 2016-10-01: Improved using special monads (JP)\n"
            " * 2016-02-03: Removed type-checking (LI)\n"
            " * 2015-03-14: Added combine with type-checking (JR)\n"
            " */\n"
            "function combine(a, b) {\n"
            "  return a + b;\n"
            "}\n"
        ),
        good="function combine(a, b) {\n  return a + b;\n}\n",
    ),
    "consistent-constant-casing": RuleExample(
        bad="const DAYS_IN_WEEK = 7;\nconst daysInMonth = 30;\nconst MAX_RETRIES = 3;\n",
        good="const DAYS_IN_WEEK = 7;\nconst DAYS_IN_MONTH = 30;\nconst MAX_RETRIES = 3;\n",
    ),
}


def example_for(name: str) -> RuleExample | None:
    return EXAMPLES.get(name)
