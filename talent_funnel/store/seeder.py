"""Deterministic synthetic healthcare candidate pools for demos and tests."""

import logging
import random
from datetime import datetime, timedelta

from talent_funnel.core.schemas import Availability, Candidate

logger = logging.getLogger(__name__)

JOB_TITLES = [
    "Registered Nurse", "Clinical Nurse Specialist", "Nurse Practitioner", "Emergency Room Nurse",
    "Licensed Practical Nurse", "Healthcare Administrator", "Director of Nursing",
    "Surgical Technologist", "Medical Assistant", "Physical Therapist", "Occupational Therapist",
    "Respiratory Therapist", "Pharmacist", "Radiologic Technologist", "Laboratory Technician",
    "Social Worker", "Case Manager", "Nurse Manager", "Clinical Coordinator",
    "Patient Care Coordinator", "Charge Nurse", "Staff Nurse", "ICU Nurse", "Pediatric Nurse",
    "Oncology Nurse", "Cardiac Nurse", "Operating Room Nurse", "Home Health Nurse",
    "Nurse Educator", "Psychiatric Nurse", "Geriatric Nurse", "Neonatal Nurse",
    "Dialysis Technician", "EKG Technician", "Ultrasound Technician",
]

LOCATIONS = [
    "New York, NY", "Los Angeles, CA", "Chicago, IL", "Houston, TX", "Phoenix, AZ",
    "Philadelphia, PA", "San Antonio, TX", "San Diego, CA", "Dallas, TX", "Austin, TX",
    "Jacksonville, FL", "Columbus, OH", "Charlotte, NC", "San Francisco, CA", "Seattle, WA",
    "Denver, CO", "Washington, DC", "Boston, MA", "Nashville, TN", "Detroit, MI",
    "Portland, OR", "Las Vegas, NV", "Baltimore, MD", "Atlanta, GA", "Miami, FL",
    "Minneapolis, MN", "Tampa, FL", "New Orleans, LA",
]

SKILL_SETS = [
    ["Critical Care", "Patient Assessment", "Emergency Response", "Medical Records", "IV Therapy"],
    ["Pediatric Care", "Child Development", "Family Education", "Immunizations", "Growth Monitoring"],
    ["Oncology", "Chemotherapy Administration", "Pain Management", "Patient Education",
     "Clinical Research"],
    ["Emergency Medicine", "Trauma Care", "Triage", "Crisis Management", "Advanced Life Support"],
    ["Surgical Procedures", "Sterile Technique", "Operating Room Protocols", "Instrument Handling",
     "Patient Positioning"],
    ["Geriatric Care", "Dementia Care", "Fall Prevention", "Medication Management",
     "End-of-Life Care"],
    ["Mental Health", "Crisis Intervention", "Therapeutic Communication", "Behavioral Assessment",
     "Group Therapy"],
    ["Cardiac Care", "EKG Interpretation", "Cardiac Monitoring", "Chest Pain Assessment",
     "Heart Failure Management"],
    ["Respiratory Care", "Ventilator Management", "Oxygen Therapy", "Pulmonary Function",
     "Airway Management"],
    ["Infection Control", "Isolation Procedures", "Sterilization", "Disease Prevention",
     "Outbreak Management"],
    ["Leadership", "Team Management", "Staff Development", "Budget Management",
     "Strategic Planning"],
    ["Electronic Health Records", "Healthcare Technology", "Data Entry", "System Training",
     "Workflow Optimization"],
    ["Bilingual Spanish", "Cultural Competency", "Translation Services", "Community Outreach",
     "Diversity Training"],
]

EDUCATION_LEVELS = [
    "ADN - Associate Degree in Nursing",
    "BSN - Bachelor of Science in Nursing",
    "MSN - Master of Science in Nursing",
    "DNP - Doctor of Nursing Practice",
    "Certificate - Licensed Practical Nurse",
    "Certificate - Medical Assistant",
    "BS - Bachelor of Science in Health Sciences",
    "MS - Master of Science in Healthcare Administration",
    "DPT - Doctor of Physical Therapy",
    "PharmD - Doctor of Pharmacy",
]

SOURCES = ["LinkedIn", "Career Site", "Referral", "Job Board", "Hiring Event", "Direct Contact"]

FIRST_NAMES = [
    "Sarah", "Michael", "Emma", "David", "Jennifer", "Robert", "Anna", "Maria", "James", "Lisa",
    "Christopher", "Jessica", "Daniel", "Ashley", "Matthew", "Amanda", "Anthony", "Melissa",
    "Kevin", "Samantha", "Brian", "Rachel", "Jason", "Amy", "Olivia", "Eric", "Catherine",
]

LAST_NAMES = [
    "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Lee",
    "Perez", "Thompson", "White", "Harris", "Clark", "Lewis", "Walker", "Nguyen", "Rivera",
]

_SUMMARY_TEMPLATES = [
    "Experienced {title} with {years} years in hospital settings, specializing in {s0} and {s1}.",
    "Dedicated {title} with {years} years of experience in {s0}, known for excellent patient "
    "care and team collaboration.",
    "Skilled {title} with {years} years of clinical experience, expertise in {s0} and {s1}.",
    "Compassionate {title} with {years} years in healthcare, specializing in {s0} and patient "
    "education.",
]

# Fixed reference so a given seed always yields identical last_active values.
_EPOCH = datetime(2025, 1, 1)


def generate_candidates(count: int = 100, seed: int | None = None) -> list[Candidate]:
    """Generate ``count`` synthetic healthcare candidates.

    The same ``seed`` always produces the same pool. Ids are ``cand-0001``
    style and unique within the pool.
    """
    if count < 0:
        msg = f"count must be >= 0, got {count}"
        raise ValueError(msg)

    rng = random.Random(seed)
    candidates = []
    for i in range(count):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        title = rng.choice(JOB_TITLES)
        years = rng.randint(3, 17)
        skills = rng.choice(SKILL_SETS)
        summary = rng.choice(_SUMMARY_TEMPLATES).format(
            title=title.lower(), years=years, s0=skills[0].lower(), s1=skills[1].lower(),
        )
        candidates.append(Candidate(
            id=f"cand-{i + 1:04d}",
            name=f"{first} {last}",
            job_title=title,
            location=rng.choice(LOCATIONS),
            experience=years,
            skills=list(skills),
            industry="Healthcare",
            education=rng.choice(EDUCATION_LEVELS),
            summary=summary,
            availability=rng.choice(list(Availability)),
            last_active=_EPOCH - timedelta(days=rng.randint(0, 29)),
            email=f"{first.lower()}.{last.lower()}@email.com",
            phone=f"+1 ({rng.randint(100, 999)}) {rng.randint(100, 999)}-{rng.randint(1000, 9999)}",
            source=rng.choice(SOURCES),
        ))

    logger.info("Generated %d synthetic candidates (seed=%s)", len(candidates), seed)
    return candidates
