"""
Tests for the typed ABI model
"""

import json

import pytest

from payra.abi import PAYRA_ABI, AbiFunction, AbiParam, AbiRegistry, AbiType
from payra.exceptions import AbiError, FunctionNotFoundError


class TestAbiParam:
    def test_scalar_tags(self):
        assert AbiParam.from_dict({"type": "address"}).tag is AbiType.ADDRESS
        assert AbiParam.from_dict({"type": "uint256"}).tag is AbiType.UINT
        assert AbiParam.from_dict({"type": "int64"}).tag is AbiType.INT
        assert AbiParam.from_dict({"type": "bytes32"}).tag is AbiType.FIXED_BYTES
        assert AbiParam.from_dict({"type": "string"}).tag is AbiType.STRING

    def test_uint_alias_is_canonicalized(self):
        assert AbiParam.from_dict({"type": "uint"}).canonical_type == "uint256"
        assert AbiParam.from_dict({"type": "int[]"}).canonical_type == "int256[]"
        assert AbiParam.from_dict({"type": "uint256"}).canonical_type == "uint256"

    def test_tuple_array(self):
        param = AbiParam.from_dict(
            {
                "name": "items",
                "type": "tuple[]",
                "components": [
                    {"name": "token", "type": "address"},
                    {"name": "amount", "type": "uint256"},
                ],
            }
        )
        assert param.tag is AbiType.ARRAY
        assert param.canonical_type == "(address,uint256)[]"

    @pytest.mark.parametrize("bad", ["uint7", "uint512", "bytes33", "fixed128x18", "mapping"])
    def test_unsupported_types(self, bad):
        with pytest.raises(AbiError):
            AbiParam.from_dict({"type": bad})

    def test_missing_type(self):
        with pytest.raises(AbiError):
            AbiParam.from_dict({"name": "x"})

    def test_tuple_without_components(self):
        with pytest.raises(AbiError):
            AbiParam.from_dict({"type": "tuple"})


class TestAbiFunction:
    def test_signature(self):
        fn = AbiFunction.from_dict(PAYRA_ABI[1])
        assert fn.name == "getOrderStatus"
        assert fn.signature == "getOrderStatus(uint256,string)"
        assert fn.output_types == ["bool", "address", "uint256", "uint256", "uint256"]

    def test_no_inputs(self):
        fn = AbiFunction.from_dict({"name": "getRegistryDetails", "type": "function"})
        assert fn.signature == "getRegistryDetails()"


class TestAbiRegistry:
    def test_default_registry(self):
        registry = AbiRegistry.default()
        for name in ("forward", "getOrderStatus", "isOrderPaid", "getRegistryDetails"):
            assert name in registry
        assert registry.get("forward").signature == "forward(bytes)"

    def test_missing_function(self):
        with pytest.raises(FunctionNotFoundError, match="payOrder"):
            AbiRegistry.default().get("payOrder")

    def test_skips_non_function_entries(self):
        registry = AbiRegistry.from_abi(
            [
                {"type": "event", "name": "OrderPaid", "inputs": [{"type": "uint256"}]},
                {"type": "constructor", "inputs": []},
                {"type": "function", "name": "isOrderPaid", "inputs": [], "outputs": []},
            ]
        )
        assert registry.names() == ["isOrderPaid"]

    def test_malformed_document_fails_eagerly(self):
        with pytest.raises(AbiError):
            AbiRegistry.from_abi([{"type": "function", "name": "f", "inputs": [{"type": "uint7"}]}])
        with pytest.raises(AbiError):
            AbiRegistry.from_abi(None)
        with pytest.raises(AbiError):
            AbiRegistry.from_abi(["not an entry"])

    def test_from_file(self, tmp_path):
        path = tmp_path / "payraABI.json"
        path.write_text(json.dumps({"abi": PAYRA_ABI}))
        registry = AbiRegistry.from_file(path)
        assert registry.get("isOrderPaid").output_types == ["bool"]

    def test_from_file_plain_list(self, tmp_path):
        path = tmp_path / "payraABI.json"
        path.write_text(json.dumps(PAYRA_ABI))
        assert "forward" in AbiRegistry.from_file(path)

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "payraABI.json"
        path.write_text("{not json")
        with pytest.raises(AbiError):
            AbiRegistry.from_file(path)

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(AbiError):
            AbiRegistry.from_file(tmp_path / "missing.json")

    def test_load_without_path_uses_bundled_abi(self):
        assert AbiRegistry.load(None).names() == AbiRegistry.default().names()

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "payraABI.json"
        path.write_text(json.dumps(PAYRA_ABI[:1]))
        assert AbiRegistry.load(path).names() == ["forward"]
