"""
Tests for the write pipeline.

Covers:
- Primary record and index writes
- Retention (EXPIRE / PERSIST) on every touched key
- Non-atomic, no-rollback batch failure semantics
- Microsoft product index
"""
from datetime import datetime

import pytest

from vulnstore.errors import BatchExecFailed, EncodeFailed
from vulnstore.models import DebianCVE, DebianPackage, DebianRelease, UbuntuCVE, Vendor
from vulnstore.observability import RunMetrics
from vulnstore.storage import CveWriter


def test_insert_then_read(writer, reader, debian_bash_cve):
    written = writer.insert_debian([debian_bash_cve])

    assert written == 1
    assert reader.get_debian("CVE-2022-3715") == debian_bash_cve


def test_primary_record_layout(writer, redis_client, debian_bash_cve):
    writer.insert_debian([debian_bash_cve])

    stored = redis_client.hgetall("CVE#CVE-2022-3715")
    assert list(stored) == ["Debian"]
    assert stored["Debian"].startswith("{")


def test_index_consistency(writer, redis_client, debian_multi_package_cve):
    writer.insert_debian([debian_multi_package_cve])

    for package_name in ("glibc", "eglibc"):
        key = f"CVE#D#{package_name}"
        assert redis_client.zrange(key, 0, -1) == ["CVE-2023-4911"]
        assert redis_client.zscore(key, "CVE-2023-4911") == 0


def test_index_prefix_per_vendor(
    writer, redis_client, redhat_kernel_cve, ubuntu_openssl_cve, microsoft_cve
):
    writer.insert_redhat([redhat_kernel_cve])
    writer.insert_ubuntu([ubuntu_openssl_cve])
    writer.insert_microsoft([microsoft_cve])

    assert redis_client.zrange("CVE#R#kernel", 0, -1) == ["CVE-2023-1829"]
    assert redis_client.zrange("CVE#R#kernel-rt", 0, -1) == ["CVE-2023-1829"]
    assert redis_client.zrange("CVE#U#openssl1.0", 0, -1) == ["CVE-2023-0286"]
    assert redis_client.zrange("CVE#K#5025229", 0, -1) == ["CVE-2023-21554"]


def test_vendors_share_primary_key(writer, reader, redis_client, debian_bash_cve):
    ubuntu = UbuntuCVE(candidate="CVE-2022-3715", priority="low")

    writer.insert_debian([debian_bash_cve])
    writer.insert_ubuntu([ubuntu])

    assert set(redis_client.hkeys("CVE#CVE-2022-3715")) == {"Debian", "Ubuntu"}
    assert reader.get_debian("CVE-2022-3715") == debian_bash_cve
    assert reader.get_ubuntu("CVE-2022-3715") == ubuntu


def test_retention_sets_ttl(redis_client, debian_bash_cve):
    CveWriter(redis_client, expire_seconds=3600).insert_debian([debian_bash_cve])

    for key in ("CVE#CVE-2022-3715", "CVE#D#bash"):
        ttl = redis_client.ttl(key)
        assert 0 < ttl <= 3600


def test_zero_retention_clears_existing_ttl(redis_client, debian_bash_cve):
    CveWriter(redis_client, expire_seconds=60).insert_debian([debian_bash_cve])
    CveWriter(redis_client, expire_seconds=0).insert_debian([debian_bash_cve])

    assert redis_client.ttl("CVE#CVE-2022-3715") == -1
    assert redis_client.ttl("CVE#D#bash") == -1


def test_negative_retention_rejected(redis_client):
    with pytest.raises(ValueError):
        CveWriter(redis_client, expire_seconds=-1)


def test_empty_input_is_noop(writer, redis_client):
    assert writer.insert(Vendor.DEBIAN, []) == 0
    assert redis_client.dbsize() == 0


def test_document_without_sub_entries(writer, reader, redis_client):
    cve = DebianCVE(cve_id="CVE-2024-0001", description="no packages yet")

    writer.insert_debian([cve])

    assert reader.get_debian("CVE-2024-0001") == cve
    assert redis_client.keys("CVE#D#*") == []


def test_lazy_input(writer, reader):
    def generate():
        for n in range(3):
            yield DebianCVE(
                cve_id=f"CVE-2024-000{n}",
                package=[DebianPackage(package_name="zlib", release=[DebianRelease(product_name="bookworm", status="open")])],
            )

    assert writer.insert_debian(generate()) == 3
    assert reader.get_cve_ids_by_package(Vendor.DEBIAN, "zlib") == [
        "CVE-2024-0000", "CVE-2024-0001", "CVE-2024-0002"
    ]


def test_wrong_document_type_rejected(writer, ubuntu_openssl_cve):
    with pytest.raises(TypeError):
        writer.insert(Vendor.DEBIAN, [ubuntu_openssl_cve])


def test_wrong_typed_field_is_not_stored(writer, redis_client, redhat_kernel_cve):
    redhat_kernel_cve.cvss3_base_score = 7.8

    with pytest.raises(EncodeFailed, match="cvss3_base_score"):
        writer.insert_redhat([redhat_kernel_cve])

    assert redis_client.dbsize() == 0


def test_unencodable_text_is_not_stored(writer, redis_client, debian_bash_cve):
    debian_bash_cve.description = "bad \ud800 text"

    with pytest.raises(EncodeFailed):
        writer.insert_debian([debian_bash_cve])

    assert redis_client.dbsize() == 0


def test_index_is_append_only(writer, reader, debian_multi_package_cve):
    writer.insert_debian([debian_multi_package_cve])

    updated = DebianCVE(
        cve_id="CVE-2023-4911",
        package=[p for p in debian_multi_package_cve.package if p.package_name == "glibc"],
    )
    writer.insert_debian([updated])

    assert reader.get_debian("CVE-2023-4911") == updated
    # Stale membership is kept until expiry
    assert reader.get_cve_ids_by_package(Vendor.DEBIAN, "eglibc") == ["CVE-2023-4911"]


def test_batch_failure_keeps_earlier_records(writer, reader, redis_client, debian_bash_cve):
    first = DebianCVE(
        cve_id="CVE-2024-1000",
        package=[DebianPackage(package_name="curl", release=[DebianRelease(product_name="bookworm", status="open")])],
    )
    last = DebianCVE(cve_id="CVE-2024-2000")

    # ZADD against a string key fails server-side with WRONGTYPE
    redis_client.set("CVE#D#bash", "not a sorted set")

    with pytest.raises(BatchExecFailed):
        writer.insert_debian([first, debian_bash_cve, last])

    assert reader.get_debian("CVE-2024-1000") == first
    assert reader.get_debian("CVE-2024-2000") is None


def test_microsoft_product_index(writer, reader, redis_client, microsoft_cve, microsoft_products):
    written = writer.insert_microsoft([microsoft_cve], microsoft_products)

    assert written == 1
    assert reader.get_product_names("11568") == ["Windows 10 Version 1809 for 32-bit Systems"]
    assert reader.get_cve_ids_by_kb_id("5025221") == ["CVE-2023-21554"]
    assert redis_client.ttl("CVE#P#11568") == -1


def test_microsoft_product_index_written_without_cves(writer, reader, microsoft_products):
    assert writer.insert_microsoft([], microsoft_products) == 0
    assert reader.get_product_names("11569") == ["Windows 10 Version 1809 for x64-based Systems"]


def test_microsoft_product_retention(redis_client, microsoft_products):
    CveWriter(redis_client, expire_seconds=120).insert_microsoft([], microsoft_products)

    assert 0 < redis_client.ttl("CVE#P#11568") <= 120


def test_metrics_recorded(redis_client, debian_multi_package_cve, debian_bash_cve):
    metrics = RunMetrics(run_id="test_run", started_at=datetime.utcnow())
    writer = CveWriter(redis_client, metrics=metrics)

    writer.insert_debian([debian_multi_package_cve, debian_bash_cve])

    assert metrics.records_written["Debian"] == 2
    assert metrics.index_members["Debian"] == 3
