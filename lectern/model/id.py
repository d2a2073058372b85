from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KeyLength: t.Final[int] = 22


class ShortUUIDKey(str):
    """A shortuuid prefixed with a four-letter type tag, e.g. `crse$<22 chars>`.

    Only the 22-character key part is stored in the database (see
    `lectern.storage.type.ShortUUIDKeyType`); the prefix is restored when a
    row is read back.
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @classmethod
    def validate_str(cls, v: ShortUUIDKey | str | None, _: p.ValidationInfo) -> ShortUUIDKey | None:
        return cls(v) if v is not None else v

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {
            "type": "string",
            "pattern": f"^{cls.prefix}\\{cls.separator}[0-9A-Za-z]{{{KeyLength}}}$",
        }

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str_schema = core_schema.chain_schema([
            core_schema.str_schema(),
            core_schema.with_info_after_validator_function(cls.validate_str, schema=core_schema.str_schema()),
        ])
        to_str = core_schema.plain_serializer_function_ser_schema(cls.__str__)

        return core_schema.json_or_python_schema(
            json_schema=from_str_schema,
            python_schema=core_schema.union_schema([
                core_schema.is_instance_schema(cls),
                from_str_schema,
            ]),
            serialization=to_str,
        )

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4)], separator: t.Annotated[str, ant.Len(1)] = "$"):
        super().__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    @classmethod
    def _check(cls, s: str) -> None:
        if not s.startswith(cls.prefix + cls.separator):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {cls.prefix}")
        key = s[len(cls.prefix) + len(cls.separator) :]
        if len(key) != KeyLength:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KeyLength}")
        alphabet = shortuuid.get_alphabet()
        if any((c not in alphabet) for c in key):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")

    def __new__(cls, s: str | None = None, /, key: str | None = None) -> t.Self:
        """
        s must be a complete, prefixed key and is validated
        key is the bare shortuuid as stored, and is trusted (fast path for
            marshaling rows)
        with neither, a fresh key is generated
        """
        if key is None:
            if s is not None:
                cls._check(s)
                return super().__new__(cls, s)
            key = shortuuid.uuid()
        return super().__new__(cls, cls.separator.join((cls.prefix, key)))

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key!s}>"


# fmt: off
class UserID(ShortUUIDKey, prefix="user"): ...
class ProfileID(ShortUUIDKey, prefix="prof"): ...
class CourseID(ShortUUIDKey, prefix="crse"): ...
class CourseItemID(ShortUUIDKey, prefix="item"): ...
class EnrollmentID(ShortUUIDKey, prefix="enrl"): ...
class SubmissionID(ShortUUIDKey, prefix="subm"): ...
class QuestionID(ShortUUIDKey, prefix="ques"): ...
class OptionID(ShortUUIDKey, prefix="optn"): ...
