"""
Side-effect policy attached to every stub body of one target.
"""

import re
from enum import IntFlag


class SideEffectPolicy(IntFlag):
    """Combinable flags mirroring the NullObjLog enum in the attribute source."""

    NONE = 0
    LOG = 1
    LOG_ERROR = 1 << 1
    LOG_WARNING = 1 << 2
    THROW = 1 << 3

    def actions(self) -> list["SideEffectPolicy"]:
        """Flags set in this policy, in emission order (THROW always last)."""
        return [flag for flag in EMISSION_ORDER if flag & self]

    @classmethod
    def parse(cls, text: str | None) -> "SideEffectPolicy":
        """
        Parse an attribute argument as written in source.

        Accepts 'NullObjLog.DebugLog | NullObjLog.ThrowException', bare member names,
        named arguments ('logType: ...'), casts and integer literals.

        Raises:
            ValueError: If a token is neither a known member nor an integer in range
        """
        if text is None or not text.strip():
            return cls.NONE

        body = _NAMED_ARGUMENT.sub("", text.strip(), count=1)
        policy = cls.NONE
        for token in body.split("|"):
            token = _CAST.sub("", token).strip().strip("()").strip()
            if not token:
                raise ValueError(f"Empty flag in side-effect policy '{text}'")
            if _INTEGER.fullmatch(token):
                value = int(token, 0)
                if value < 0 or value & ~int(ALL_FLAGS):
                    raise ValueError(f"Side-effect policy value {value} is out of range")
                policy |= cls(value)
                continue
            member = token.split(".")[-1]
            if member not in SOURCE_NAMES:
                raise ValueError(f"Unknown side-effect flag '{token}' in '{text}'")
            policy |= SOURCE_NAMES[member]
        return policy

    def source_expression(self, enum_name: str = "NullObjLog") -> str:
        """Render as a C# flag expression, e.g. 'NullObjLog.DebugLog | NullObjLog.ThrowException'."""
        names = {flag: name for name, flag in SOURCE_NAMES.items()}
        if not self:
            return f"{enum_name}.None"
        return " | ".join(f"{enum_name}.{names[flag]}" for flag in self.actions())


EMISSION_ORDER = (
    SideEffectPolicy.LOG,
    SideEffectPolicy.LOG_ERROR,
    SideEffectPolicy.LOG_WARNING,
    SideEffectPolicy.THROW,
)

ALL_FLAGS = (
    SideEffectPolicy.LOG
    | SideEffectPolicy.LOG_ERROR
    | SideEffectPolicy.LOG_WARNING
    | SideEffectPolicy.THROW
)

# Member names of the generated NullObjLog enum
SOURCE_NAMES = {
    "None": SideEffectPolicy.NONE,
    "DebugLog": SideEffectPolicy.LOG,
    "DebugLogErr": SideEffectPolicy.LOG_ERROR,
    "DebugLogWarn": SideEffectPolicy.LOG_WARNING,
    "ThrowException": SideEffectPolicy.THROW,
}

_NAMED_ARGUMENT = re.compile(r"^[A-Za-z_]\w*\s*(?::|=(?!=))\s*")
_CAST = re.compile(r"\(\s*[A-Za-z_][\w.]*\s*\)(?=\s*[\w(])")
_INTEGER = re.compile(r"0[xX][0-9a-fA-F]+|\d+")
