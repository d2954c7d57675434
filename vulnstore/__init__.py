"""
vulnstore: a Redis-backed store for vendor CVE records.

Vendor feeds (Red Hat, Debian, Ubuntu, Microsoft) are normalized into
document models, written as hash fields keyed by CVE ID, and indexed by
package / KB / product in sorted sets so that "which CVEs affect package X
on release Y" can be answered without scanning the keyspace.
"""

__version__ = "0.3.0"
