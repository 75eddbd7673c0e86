"""
Fixed demo dataset shown whenever the live record store is empty or unreachable.
"""

import copy

DEMO_CANDIDATES: list[dict] = [
    {
        "id": "demo-c1",
        "name": "John Baptist Okello",
        "role": "QHSE Supervisor",
        "status": "VERIFIED",
        "timestamp": "2025-01-15T09:30:00+00:00",
        "source": "UPLOAD",
        "email": "jb.okello@example.ug",
        "emailVerified": True,
        "basicScore": 82,
        "report": {
            "candidateName": "John Baptist Okello",
            "districtOfOrigin": "Hoima",
            "isHostCommunity": True,
            "certificationsValid": True,
            "integrityScore": 94,
            "riskAssessment": {
                "level": "LOW",
                "reason": "ID, LC1 letter and NEBOSH certificate are consistent.",
            },
            "auditNotes": "Oil & Gas profile. Host Community status confirmed from National ID and LC1 letter.",
            "missingDocuments": [],
            "identityVerification": {
                "isMatch": True,
                "confidence": 96,
                "reason": "Selfie matches the National ID photo.",
            },
        },
        "osint": None,
        "documents": [],
    },
    {
        "id": "demo-c2",
        "name": "Sarah Namukasa",
        "role": "Credit Analyst",
        "status": "REJECTED",
        "timestamp": "2025-01-14T14:05:00+00:00",
        "source": "UPLOAD",
        "email": "s.namukasa@example.ug",
        "emailVerified": False,
        "basicScore": None,
        "report": {
            "candidateName": "Sarah Namukasa",
            "districtOfOrigin": "Wakiso",
            "isHostCommunity": False,
            "certificationsValid": False,
            "integrityScore": 41,
            "riskAssessment": {
                "level": "HIGH",
                "reason": "CPA certificate number does not match the issuing body format.",
            },
            "auditNotes": "Banking profile. Fit and Proper indicators incomplete; certificate authenticity in doubt.",
            "missingDocuments": ["LC1 Letter", "Certificate of Good Conduct"],
        },
        "osint": None,
        "documents": [],
    },
    {
        "id": "demo-c3",
        "name": "David K. Muwonge",
        "role": "Heavy Equipment Operator",
        "status": "PENDING",
        "timestamp": "2025-01-13T08:15:00+00:00",
        "source": "LINKEDIN",
        "email": None,
        "emailVerified": False,
        "basicScore": None,
        "report": None,
        "osint": None,
        "documents": [],
    },
]

DEMO_JOBS: list[dict] = [
    {
        "id": "demo-j1",
        "title": "QHSE Supervisor",
        "company": "TotalEnergies EP",
        "location": "Tilenga Project",
        "type": "Full-time",
        "description": (
            "Looking for an experienced QHSE supervisor with NEBOSH certification and at least "
            "5 years in oil & gas. Must be willing to work in a rotational shift."
        ),
        "requiredSkills": ["NEBOSH", "HSE", "Audit", "Risk Management"],
        "postedDate": "2025-01-10T08:00:00+00:00",
    },
    {
        "id": "demo-j2",
        "title": "Heavy Equipment Operator",
        "company": "CNOOC",
        "location": "Kingfisher",
        "type": "Contract",
        "description": (
            "Certified operator for Excavators and Graders. Valid permit class H required. "
            "Minimum 3 years experience operating in challenging terrain."
        ),
        "requiredSkills": ["Driving Permit", "Heavy Machinery", "Excavator", "Grader"],
        "postedDate": "2025-01-08T08:00:00+00:00",
    },
]

DEMO_DATA: dict[str, list[dict]] = {
    "candidates": DEMO_CANDIDATES,
    "jobs": DEMO_JOBS,
}


def demo_records(collection: str) -> list[dict]:
    """Fresh deep copy of the demo records for a collection."""
    return copy.deepcopy(DEMO_DATA.get(collection, []))
