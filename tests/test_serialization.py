"""
Tests for converting hydrated models back to plain data.
Run from the project root: python -m pytest tests/test_serialization.py -v
"""
import unittest
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from errors import CyclicSchemaError, SerializationError
from schemas import Hydratable


class Status(str, Enum):
    ACTIVE = "active"


class Measurement(BaseModel):
    value: float


class ContactDto(Hydratable):
    email: str = ""
    opt_in: bool = False


class AccountDto(Hydratable):
    account_id: str = ""
    balance: float = 0.0
    active: bool = False
    contact: Optional[ContactDto] = None
    contacts: list[ContactDto] = Field(default_factory=list)
    payload: Any = None


class FlatDto(Hydratable):
    first_name: str = ""
    age: int = 0
    active: bool = False


class TestStructuredValue(unittest.TestCase):
    def test_scalar_round_trip(self):
        """Structured value equals the record restricted to declared fields."""
        record = {"first_name": "Ada", "age": 36, "active": True, "extra": 1}
        dto = FlatDto.from_record(record)
        self.assertEqual(dto.to_structured_value(), {"firstName": "Ada", "age": 36, "active": True})

    def test_python_names(self):
        dto = FlatDto.from_record({"firstName": "Ada"})
        self.assertEqual(dto.to_structured_value(by_alias=False), {"first_name": "Ada", "age": 0, "active": False})

    def test_nested_models_converted(self):
        account = AccountDto.from_record({
            "account_id": "a1",
            "contact": {"email": "a@example.com"},
            "contacts": [{"email": "b@example.com", "opt_in": True}],
        })
        value = account.to_structured_value()
        self.assertEqual(value["contact"], {"email": "a@example.com", "optIn": False})
        self.assertEqual(value["contacts"], [{"email": "b@example.com", "optIn": True}])
        self.assertEqual(list(value), ["accountId", "balance", "active", "contact", "contacts", "payload"])

    def test_plain_containers_and_known_types(self):
        """Dicts, tuples, datetimes and enums become JSON-compatible values."""
        account = AccountDto.from_record({
            "payload": {"when": datetime(2024, 1, 2, 3, 4, 5), "tags": ("x", "y"), "status": Status.ACTIVE},
        })
        self.assertEqual(
            account.to_structured_value()["payload"],
            {"when": "2024-01-02T03:04:05", "tags": ["x", "y"], "status": "active"},
        )

    def test_unknown_object_rejected(self):
        account = AccountDto.from_record({"payload": object()})
        with self.assertRaises(SerializationError) as ctx:
            account.to_structured_value()
        self.assertIn("AccountDto.payload", str(ctx.exception))

    def test_non_finite_float_rejected(self):
        account = AccountDto.from_record({"balance": float("nan")})
        with self.assertRaises(SerializationError):
            account.to_structured_value()

    def test_int_mapping_keys_become_strings(self):
        """Int keys are written as strings, like a JSON encoder would."""
        account = AccountDto.from_record({"payload": {1: "one", "two": 2}})
        self.assertEqual(account.to_structured_value()["payload"], {"1": "one", "two": 2})

    def test_other_mapping_keys_rejected(self):
        account = AccountDto.from_record({"payload": {(1, 2): "pair"}})
        with self.assertRaises(SerializationError):
            account.to_structured_value()

    def test_undecodable_bytes_rejected(self):
        """Bytes that are not UTF-8 raise SerializationError, not UnicodeDecodeError."""
        account = AccountDto.from_record({"payload": b"\xff\xfe"})
        with self.assertRaises(SerializationError) as ctx:
            account.to_structured_value()
        self.assertIn("AccountDto.payload", str(ctx.exception))

    def test_utf8_bytes_converted(self):
        account = AccountDto.from_record({"payload": b"abc"})
        self.assertEqual(account.to_structured_value()["payload"], "abc")

    def test_non_finite_float_in_set_rejected(self):
        account = AccountDto.from_record({"payload": {float("inf")}})
        with self.assertRaises(SerializationError):
            account.to_structured_value()

    def test_non_finite_float_in_plain_model_rejected(self):
        """Plain pydantic models are converted and their values checked too."""
        account = AccountDto.from_record({"payload": Measurement(value=float("nan"))})
        with self.assertRaises(SerializationError):
            account.to_structured_value()

    def test_plain_model_converted(self):
        account = AccountDto.from_record({"payload": Measurement(value=1.5)})
        self.assertEqual(account.to_structured_value()["payload"], {"value": 1.5})

    def test_self_containing_graph_hits_depth_bound(self):
        account = AccountDto.from_record({"account_id": "a1"})
        account.payload = [account]
        with self.assertRaises(CyclicSchemaError):
            account.to_structured_value()


class TestRawFieldMap(unittest.TestCase):
    def test_shallow_snapshot(self):
        """Nested models are returned as the instances themselves."""
        account = AccountDto.from_record({"contact": {"email": "a@example.com"}, "payload": object()})
        raw = account.to_raw_field_map()
        self.assertIs(raw["contact"], account.contact)
        self.assertIs(raw["payload"], account.payload)
        self.assertEqual(list(raw), ["accountId", "balance", "active", "contact", "contacts", "payload"])

    def test_python_names(self):
        raw = AccountDto.from_record({}).to_raw_field_map(by_alias=False)
        self.assertIn("account_id", raw)


if __name__ == "__main__":
    unittest.main()
