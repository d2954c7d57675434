"""
Convert raw vendor feed payloads into normalized documents.

Fetching is done elsewhere; these functions take the parsed JSON of each
feed and produce the documents the write pipeline stores. Entries without a
CVE identifier are skipped.

Feed shapes:
- Red Hat: list of Security Data API CVE objects (name, package_state, ...)
- Debian: security tracker dump {package: {cve_id: {scope, description, releases}}}
- Ubuntu: list of CVE tracker entries (Candidate, Patches: {pkg: {release: {Status, Note}}})
- Microsoft: MSRC CVRF JSON document (ProductTree + Vulnerability list)
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

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

logger = logging.getLogger(__name__)

# MSRC CVRF enumerations
CVRF_NOTE_DESCRIPTION = 2
CVRF_STATUS_KNOWN_AFFECTED = 3
CVRF_THREAT_IMPACT = 0
CVRF_THREAT_SEVERITY = 3
CVRF_REMEDIATION_VENDOR_FIX = 2

MSRC_UPDATE_GUIDE_URL = "https://msrc.microsoft.com/update-guide/vulnerability/{cve_id}"


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _opt_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def convert_redhat(items: Iterable[Dict[str, Any]]) -> List[RedhatCVE]:
    """Convert Red Hat Security Data API CVE objects."""
    cves = []
    for item in items:
        name = item.get("name")
        if not name:
            logger.debug("Skipping Red Hat entry without name")
            continue

        bugzilla = item.get("bugzilla") or {}
        cvss3 = item.get("cvss3") or {}

        # package_state / affected_release are single objects when there is one entry
        package_state = [
            RedhatPackageState(
                product_name=str(ps.get("product_name", "")),
                fix_state=str(ps.get("fix_state", "")),
                package_name=str(ps.get("package_name", "")),
                cpe=str(ps.get("cpe", "")),
            )
            for ps in _as_list(item.get("package_state"))
        ]
        affected_release = [
            RedhatAffectedRelease(
                product_name=str(ar.get("product_name", "")),
                release_date=_opt_str(ar.get("release_date")),
                advisory=_opt_str(ar.get("advisory")),
                package=_opt_str(ar.get("package")),
                cpe=_opt_str(ar.get("cpe")),
            )
            for ar in _as_list(item.get("affected_release"))
        ]

        cves.append(RedhatCVE(
            name=name,
            threat_severity=_opt_str(item.get("threat_severity")),
            public_date=_opt_str(item.get("public_date")),
            bugzilla_id=_opt_str(bugzilla.get("id")),
            cvss3_base_score=_opt_str(cvss3.get("cvss3_base_score")),
            cvss3_scoring_vector=_opt_str(cvss3.get("cvss3_scoring_vector")),
            cwe=_opt_str(item.get("cwe")),
            statement=_opt_str(item.get("statement")),
            details=[str(d) for d in _as_list(item.get("details"))],
            references=[str(r) for r in _as_list(item.get("references"))],
            affected_release=affected_release,
            package_state=package_state,
        ))
    return cves


def convert_debian(feed: Dict[str, Dict[str, Any]]) -> List[DebianCVE]:
    """
    Regroup the package-keyed Debian tracker dump by CVE.

    The installed version of a release comes from repositories[codename].
    TEMP- identifiers (not yet assigned a CVE) are skipped.
    """
    cves: Dict[str, DebianCVE] = {}
    for package_name, entries in feed.items():
        if not isinstance(entries, dict):
            continue
        for cve_id, detail in entries.items():
            if not cve_id.startswith("CVE-") or not isinstance(detail, dict):
                continue

            releases = []
            for codename, rel in (detail.get("releases") or {}).items():
                repositories = rel.get("repositories") or {}
                releases.append(DebianRelease(
                    product_name=codename,
                    status=str(rel.get("status", "")),
                    fixed_version=_opt_str(rel.get("fixed_version")),
                    urgency=_opt_str(rel.get("urgency")),
                    version=_opt_str(repositories.get(codename)),
                ))

            cve = cves.get(cve_id)
            if cve is None:
                cve = DebianCVE(
                    cve_id=cve_id,
                    scope=_opt_str(detail.get("scope")),
                    description=_opt_str(detail.get("description")),
                )
                cves[cve_id] = cve
            cve.package.append(DebianPackage(package_name=package_name, release=releases))
    return list(cves.values())


def convert_ubuntu(items: Iterable[Dict[str, Any]]) -> List[UbuntuCVE]:
    """Convert Ubuntu CVE tracker entries."""
    cves = []
    for item in items:
        candidate = item.get("Candidate")
        if not candidate:
            logger.debug("Skipping Ubuntu entry without Candidate")
            continue

        patches = []
        for package_name, releases in (item.get("Patches") or {}).items():
            release_patches = [
                UbuntuReleasePatch(
                    release_name=release_name,
                    status=str(info.get("Status", "")),
                    note=_opt_str(info.get("Note")),
                )
                for release_name, info in (releases or {}).items()
            ]
            patches.append(UbuntuPatch(package_name=package_name, release_patches=release_patches))

        notes = []
        for note in _as_list(item.get("Notes")):
            if isinstance(note, dict):
                author = note.get("Author")
                text = note.get("Note", "")
                notes.append(f"{author}> {text}" if author else str(text))
            else:
                notes.append(str(note))

        cves.append(UbuntuCVE(
            candidate=candidate,
            public_date=_opt_str(item.get("PublicDate")),
            priority=_opt_str(item.get("Priority")),
            description=_opt_str(item.get("Description")),
            ubuntu_description=_opt_str(item.get("UbuntuDescription")),
            references=[str(r) for r in _as_list(item.get("References"))],
            notes=notes,
            bugs=[str(b) for b in _as_list(item.get("Bugs"))],
            patches=patches,
        ))
    return cves


def _cvrf_value(obj: Any) -> Optional[str]:
    if isinstance(obj, dict):
        return _opt_str(obj.get("Value"))
    return _opt_str(obj)


def convert_microsoft(document: Dict[str, Any]) -> Tuple[List[MicrosoftCVE], List[MicrosoftProduct]]:
    """
    Convert an MSRC CVRF document.

    Returns:
        Tuple of (CVE documents, distinct products from the product tree)
    """
    products: Dict[str, MicrosoftProduct] = {}
    for entry in _as_list((document.get("ProductTree") or {}).get("FullProductName")):
        product_id = _opt_str(entry.get("ProductID"))
        product_name = _cvrf_value(entry)
        if product_id and product_name and product_id not in products:
            products[product_id] = MicrosoftProduct(product_id=product_id, product_name=product_name)

    cves = []
    for vuln in _as_list(document.get("Vulnerability")):
        cve_id = vuln.get("CVE")
        if not cve_id:
            continue

        description = None
        for note in _as_list(vuln.get("Notes")):
            if note.get("Type") == CVRF_NOTE_DESCRIPTION:
                description = _cvrf_value(note)
                break

        severity = impact_type = None
        for threat in _as_list(vuln.get("Threats")):
            if threat.get("Type") == CVRF_THREAT_SEVERITY and severity is None:
                severity = _cvrf_value(threat.get("Description"))
            elif threat.get("Type") == CVRF_THREAT_IMPACT and impact_type is None:
                impact_type = _cvrf_value(threat.get("Description"))

        kb_ids: Dict[str, MicrosoftKBID] = {}
        for rem in _as_list(vuln.get("Remediations")):
            if rem.get("Type") != CVRF_REMEDIATION_VENDOR_FIX:
                continue
            kb_id = _cvrf_value(rem.get("Description"))
            if kb_id and kb_id.isdigit() and kb_id not in kb_ids:
                kb_ids[kb_id] = MicrosoftKBID(kb_id=kb_id, url=_opt_str(rem.get("URL")))

        product_ids: List[str] = []
        for status in _as_list(vuln.get("ProductStatuses")):
            if status.get("Type") == CVRF_STATUS_KNOWN_AFFECTED:
                product_ids.extend(str(p) for p in _as_list(status.get("ProductID")))

        revisions = [_opt_str(r.get("Date")) for r in _as_list(vuln.get("RevisionHistory"))]
        revisions = [r for r in revisions if r]

        cves.append(MicrosoftCVE(
            cve_id=cve_id,
            title=_cvrf_value(vuln.get("Title")),
            description=description,
            publish_date=revisions[0] if revisions else None,
            last_update_date=revisions[-1] if revisions else None,
            severity=severity,
            impact_type=impact_type,
            url=MSRC_UPDATE_GUIDE_URL.format(cve_id=cve_id),
            kb_ids=list(kb_ids.values()),
            product_ids=list(dict.fromkeys(product_ids)),
        ))
    return cves, list(products.values())
