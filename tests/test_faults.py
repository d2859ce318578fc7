"""
Tests for the fault taxonomy.
"""

import pytest

from itemdeck.cache import CacheConnectionFault, CacheFault
from itemdeck.faults import ConfigFault, Fault, FaultDomain, Severity, StorageFault


class TestFault:
    def test_explicit_fields(self):
        fault = Fault(code="X_1", message="broken", domain=FaultDomain.CACHE)
        assert str(fault) == "[X_1] broken"
        assert fault.severity is Severity.WARN
        assert fault.retryable is True

    def test_missing_fields_rejected(self):
        with pytest.raises(TypeError):
            Fault(code="X_1")

    def test_class_attributes(self):
        class Custom(Fault):
            code = "CUSTOM"
            message = "custom"
            domain = FaultDomain.SECURITY

        fault = Custom()
        assert fault.code == "CUSTOM"
        assert fault.severity is Severity.WARN
        assert fault.retryable is False

    def test_to_dict(self):
        fault = StorageFault("document-db", "create", "timeout")
        data = fault.to_dict()
        assert data["code"] == "STORAGE_FAILED"
        assert data["domain"] == "storage"
        assert data["metadata"]["operation"] == "create"


class TestFaultFamilies:
    def test_config_fault(self):
        fault = ConfigFault("bad value", field="x")
        assert fault.severity is Severity.FATAL
        assert fault.retryable is False
        assert fault.metadata == {"reason": "bad value", "field": "x"}

    def test_cache_faults(self):
        fault = CacheConnectionFault("redis", "refused")
        assert isinstance(fault, CacheFault)
        assert fault.domain == FaultDomain.CACHE
        assert fault.public is False

    def test_domain_equality(self):
        assert FaultDomain.CACHE == "cache"
        assert hash(FaultDomain.CACHE) == hash(FaultDomain("cache"))
