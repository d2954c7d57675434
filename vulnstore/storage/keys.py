"""
Redis key schema.

- HASH
  | KEY          | FIELD                              | VALUE     | PURPOSE                      |
  |--------------|------------------------------------|-----------|------------------------------|
  | CVE#$CVEID   | RedHat / Debian / Ubuntu / Microsoft | $CVEJSON | get CVE document by CVE ID   |

- ZSET (score is always 0, used for distinct membership only)
  | KEY              | MEMBER        | PURPOSE                                     |
  |------------------|---------------|---------------------------------------------|
  | CVE#R#$PKGNAME   | $CVEID        | (RedHat) related CVE IDs by package name    |
  | CVE#D#$PKGNAME   | $CVEID        | (Debian) related CVE IDs by package name    |
  | CVE#U#$PKGNAME   | $CVEID        | (Ubuntu) related CVE IDs by package name    |
  | CVE#K#$KBID      | $CVEID        | (Microsoft) related CVE IDs by KB ID        |
  | CVE#P#$PRODUCTID | $PRODUCTNAME  | (Microsoft) product names by product ID     |
"""
from vulnstore.models import Vendor

HASH_KEY_PREFIX = "CVE#"
REDHAT_INDEX_PREFIX = "CVE#R#"
DEBIAN_INDEX_PREFIX = "CVE#D#"
UBUNTU_INDEX_PREFIX = "CVE#U#"
MICROSOFT_KBID_INDEX_PREFIX = "CVE#K#"
MICROSOFT_PRODUCT_INDEX_PREFIX = "CVE#P#"

INDEX_SCORE = 0

INDEX_PREFIXES = {
    Vendor.REDHAT: REDHAT_INDEX_PREFIX,
    Vendor.DEBIAN: DEBIAN_INDEX_PREFIX,
    Vendor.UBUNTU: UBUNTU_INDEX_PREFIX,
    Vendor.MICROSOFT: MICROSOFT_KBID_INDEX_PREFIX,
}


def cve_key(cve_id: str) -> str:
    return HASH_KEY_PREFIX + cve_id


def index_key(vendor: Vendor, member_of: str) -> str:
    """Secondary index key for a package name (or KB ID for Microsoft)."""
    return INDEX_PREFIXES[vendor] + member_of


def product_key(product_id: str) -> str:
    return MICROSOFT_PRODUCT_INDEX_PREFIX + product_id
