"""
Shared pytest fixtures for CVE store tests.

Redis is replaced by fakeredis; every test gets its own in-process server so
no state leaks between tests.
"""
import fakeredis
import pytest

from vulnstore.models import (
    DebianCVE,
    DebianPackage,
    DebianRelease,
    MicrosoftCVE,
    MicrosoftKBID,
    MicrosoftProduct,
    RedhatAffectedRelease,
    RedhatCVE,
    RedhatPackageState,
    UbuntuCVE,
    UbuntuPatch,
    UbuntuReleasePatch,
)
from vulnstore.storage import CveFilter, CveReader, CveWriter


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(fake_server):
    """
    Fake redis client configured like RedisConnection.open() configures a real one.

    Yields:
        FakeRedis with decode_responses=True
    """
    client = fakeredis.FakeRedis(server=fake_server, decode_responses=True)
    yield client
    client.close()


@pytest.fixture
def writer(redis_client):
    return CveWriter(redis_client, expire_seconds=0)


@pytest.fixture
def reader(redis_client):
    return CveReader(redis_client)


@pytest.fixture
def cve_filter(reader):
    return CveFilter(reader)


@pytest.fixture
def debian_bash_cve():
    """bash with one open and one resolved entry on bookworm, plus bullseye."""
    return DebianCVE(
        cve_id="CVE-2022-3715",
        scope="local",
        description="heap buffer overflow in valid_parameter_transform",
        package=[
            DebianPackage(
                package_name="bash",
                release=[
                    DebianRelease(product_name="bookworm", status="open", urgency="not yet assigned"),
                    DebianRelease(
                        product_name="bookworm",
                        status="resolved",
                        fixed_version="5.2.15-1",
                        urgency="not yet assigned",
                        version="5.2.15-2",
                    ),
                    DebianRelease(product_name="bullseye", status="open", version="5.1-2"),
                ],
            ),
        ],
    )


@pytest.fixture
def debian_multi_package_cve():
    return DebianCVE(
        cve_id="CVE-2023-4911",
        scope="local",
        package=[
            DebianPackage(
                package_name="glibc",
                release=[DebianRelease(product_name="bookworm", status="resolved", fixed_version="2.36-9+deb12u3")],
            ),
            DebianPackage(
                package_name="eglibc",
                release=[DebianRelease(product_name="wheezy", status="open")],
            ),
        ],
    )


@pytest.fixture
def ubuntu_openssl_cve():
    return UbuntuCVE(
        candidate="CVE-2023-0286",
        public_date="2023-02-07",
        priority="high",
        description="X.400 address type confusion in X.509 GeneralName",
        references=["https://www.openssl.org/news/secadv/20230207.txt"],
        notes=["mdeslaur> affects 1.0.2 and later"],
        patches=[
            UbuntuPatch(
                package_name="openssl",
                release_patches=[
                    UbuntuReleasePatch(release_name="focal", status="released", note="1.1.1f-1ubuntu2.17"),
                    UbuntuReleasePatch(release_name="jammy", status="needed"),
                    UbuntuReleasePatch(release_name="trusty", status="ignored", note="out of standard support"),
                ],
            ),
            UbuntuPatch(
                package_name="openssl1.0",
                release_patches=[UbuntuReleasePatch(release_name="bionic", status="pending")],
            ),
        ],
    )


@pytest.fixture
def redhat_kernel_cve():
    cpe8 = "cpe:/o:redhat:enterprise_linux:8"
    cpe9 = "cpe:/o:redhat:enterprise_linux:9"
    return RedhatCVE(
        name="CVE-2023-1829",
        threat_severity="Important",
        public_date="2023-04-12T00:00:00Z",
        bugzilla_id="2188470",
        cvss3_base_score="7.8",
        cvss3_scoring_vector="CVSS:3.1/AV:L/AC:L/PR:L/UI:N/S:U/C:H/I:H/A:H",
        cwe="CWE-416",
        details=["A use-after-free vulnerability in the traffic control index filter"],
        affected_release=[
            RedhatAffectedRelease(
                product_name="Red Hat Enterprise Linux 9",
                release_date="2023-11-07T00:00:00Z",
                advisory="RHSA-2023:6583",
                package="kernel-0:5.14.0-362.8.1.el9_3",
                cpe=cpe9,
            ),
        ],
        package_state=[
            RedhatPackageState(product_name="Red Hat Enterprise Linux 8", fix_state="Affected", package_name="kernel", cpe=cpe8),
            RedhatPackageState(product_name="Red Hat Enterprise Linux 8", fix_state="Will not fix", package_name="kernel-rt", cpe=cpe8),
            RedhatPackageState(product_name="Red Hat Enterprise Linux 9", fix_state="Not affected", package_name="kernel-rt", cpe=cpe9),
            RedhatPackageState(product_name="Red Hat Enterprise Linux 7", fix_state="New", package_name="kernel", cpe="cpe:/o:redhat:enterprise_linux:7"),
        ],
    )


@pytest.fixture
def microsoft_cve():
    return MicrosoftCVE(
        cve_id="CVE-2023-21554",
        title="Microsoft Message Queuing Remote Code Execution Vulnerability",
        publish_date="2023-04-11T07:00:00",
        last_update_date="2023-04-11T07:00:00",
        severity="Critical",
        impact_type="Remote Code Execution",
        url="https://msrc.microsoft.com/update-guide/vulnerability/CVE-2023-21554",
        kb_ids=[
            MicrosoftKBID(kb_id="5025221", url="https://catalog.update.microsoft.com/v7/site/Search.aspx?q=KB5025221"),
            MicrosoftKBID(kb_id="5025229"),
        ],
        product_ids=["11568", "11569"],
    )


@pytest.fixture
def microsoft_products():
    return [
        MicrosoftProduct(product_id="11568", product_name="Windows 10 Version 1809 for 32-bit Systems"),
        MicrosoftProduct(product_id="11569", product_name="Windows 10 Version 1809 for x64-based Systems"),
    ]
