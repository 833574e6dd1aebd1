# Survey definition: sections, questions, option vocabularies.
# Everything else (wizard, gate, aggregator, table) reads from here.
import copy
import enum
from typing import Any, Dict, List, Optional, Tuple


class Section(str, enum.Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    CONSENT = "Consent"
    MWA_INFO = "MWAInfo"
    MWA_CONSENT = "MWAConsent"


START_SECTION = Section.A
TERMINAL_SECTIONS = frozenset({Section.CONSENT, Section.MWA_CONSENT})

YES_NO = {
    "yes": {"label": "Yes"},
    "no": {"label": "No"},
}

YES_MAYBE_NO = {
    "yes": {"label": "Yes"},
    "maybe": {"label": "Maybe"},
    "no": {"label": "No"},
}

CONSENT_OPTIONS = {
    "yes": {"label": "Yes, I consent"},
    "no": {"label": "No, I do not consent"},
}


def _consent_questions(first_number: int) -> Dict[str, Any]:
    return {
        "receiveUpdates": {
            "id": "receiveUpdates",
            "text": f"{first_number}. Do you consent to participate in this survey and for your responses to be used for research purposes?",
            "type": "single_choice",
            "options": CONSENT_OPTIONS,
        },
        "contactEmail": {
            "id": "contactEmail",
            "text": f"{first_number + 1}. If you wish to receive updates or results from this survey, please provide your email:",
            "type": "email",
            "hints": {"placeholder": "your.email@example.com"},
        },
    }


SURVEY_DEFINITION: Dict[str, Dict[str, Any]] = {
    Section.A.value: {
        "id": Section.A.value,
        "title": "Section A: Respondent Profile",
        "questions": {
            "doctorName": {
                "id": "doctorName",
                "text": "Doctor's Name:",
                "type": "free_text",
                "hints": {"placeholder": "Please enter your full name, Doctor"},
            },
            "hospitalName": {
                "id": "hospitalName",
                "text": "Hospital/Institution:",
                "type": "free_text",
                "hints": {"placeholder": "Please enter your hospital or institution name"},
            },
            "specialty": {
                "id": "specialty",
                "text": "1. Specialty:",
                "type": "single_choice",
                "options": {
                    "endocrinologist": {"label": "Endocrinologist"},
                    "ent": {"label": "ENT Specialist"},
                    "surgeon": {"label": "General Surgeon"},
                    "radiologist": {"label": "Radiologist"},
                    "cardiologist": {"label": "Cardiologist"},
                    "other": {"label": "Other"},
                },
                "other_field": "specialtyOther",
            },
            "yearsOfPractice": {
                "id": "yearsOfPractice",
                "text": "2. Years of Clinical Practice:",
                "type": "single_choice",
                "options": {
                    "<5": {"label": "< 5 years"},
                    "5-10": {"label": "5-10 years"},
                    "10-20": {"label": "10-20 years"},
                    ">20": {"label": "> 20 years"},
                },
            },
            "practiceSetting": {
                "id": "practiceSetting",
                "text": "3. Practice Setting:",
                "type": "single_choice",
                "options": {
                    "government": {"label": "Government Hospital"},
                    "private": {"label": "Private Hospital"},
                    "clinic": {"label": "Clinic/Nursing Home"},
                    "academic": {"label": "Academic Institution"},
                },
            },
            "managedThyroidPatients": {
                "id": "managedThyroidPatients",
                "text": "4. Have you managed patients with thyroid nodules, Doctor?",
                "type": "single_choice",
                "options": YES_NO,
            },
            "familiarWithMWA": {
                "id": "familiarWithMWA",
                "text": "5. Are you familiar with Microwave Ablation (MWA) for thyroid nodules, Doctor?",
                "type": "single_choice",
                "options": YES_NO,
            },
        },
    },
    Section.MWA_INFO.value: {
        "id": Section.MWA_INFO.value,
        "title": 'If you answered "No" to Question 5, please answer the following:',
        "questions": {
            "mwaInterest": {
                "id": "mwaInterest",
                "text": "5a. Are you interested in learning more about Microwave Ablation (MWA) for thyroid nodules?",
                "type": "single_choice",
                "options": YES_MAYBE_NO,
            },
            "mwaLearnMethod": {
                "id": "mwaLearnMethod",
                "text": "5b. What is your preferred method for learning about new medical technologies?",
                "type": "multi_choice",
                "options": {
                    "workshops": {"label": "Workshops/Hands-on training"},
                    "online": {"label": "Online courses/webinars"},
                    "literature": {"label": "Reading medical literature"},
                    "colleagues": {"label": "Discussions with colleagues"},
                    "other": {"label": "Other"},
                },
                "other_field": "mwaLearnOther",
            },
            "mwaAttendCME": {
                "id": "mwaAttendCME",
                "text": "5c. Would you consider attending a CME session or workshop on MWA if offered?",
                "type": "single_choice",
                "options": YES_MAYBE_NO,
            },
            "mwaConcerns": {
                "id": "mwaConcerns",
                "text": "5d. What are your main concerns or questions about MWA for thyroid nodules?",
                "type": "multi_choice",
                "options": {
                    "safety": {"label": "Safety"},
                    "effectiveness": {"label": "Effectiveness"},
                    "cost": {"label": "Cost"},
                    "availability": {"label": "Availability"},
                    "other": {"label": "Other"},
                },
                "other_field": "mwaConcernOther",
            },
            "mwaReceiveResources": {
                "id": "mwaReceiveResources",
                "text": "5e. Would you like to receive educational resources or updates about MWA?",
                "type": "single_choice",
                "options": {
                    "yes": {"label": "Yes (please provide your contact/email)"},
                    "no": {"label": "No"},
                },
                "other_field": "mwaResourceEmail",
            },
        },
        "resources": [
            {
                "title": "Microwave ablation for thyroid nodules: a new string to the bow for percutaneous treatments? (PMC)",
                "url": "https://www.ncbi.nlm.nih.gov/pmc/articles/PMC10143080/",
            },
            {
                "title": "Microwave ablation of benign thyroid nodules (PubMed)",
                "url": "https://pubmed.ncbi.nlm.nih.gov/32441697/",
            },
            {
                "title": "Long-term outcome of microwave ablation for benign thyroid nodules: Over 48-month follow-up study (Frontiers in Endocrinology)",
                "url": "https://www.frontiersin.org/articles/10.3389/fendo.2022.1012347/full",
            },
            {
                "title": "RFA vs. MWA: Best Treatment for Benign Thyroid Nodules (Cambridge Interventional)",
                "url": "https://cambridgeinterventional.com/rfa-vs-mwa-best-treatment-for-benign-thyroid-nodules/",
            },
            {
                "title": "A Systematic Review and Meta-Analysis (Korean Journal of Radiology)",
                "url": "https://www.kjronline.org/DOIx.php?id=10.3348/kjr.2020.0197",
            },
            {
                "title": "Local Ablation of Thyroid Nodules (IntechOpen)",
                "url": "https://www.intechopen.com/chapters/64670",
            },
        ],
    },
    Section.B.value: {
        "id": Section.B.value,
        "title": "Section B: Awareness & Knowledge",
        "questions": {
            "learnedAboutMWA": {
                "id": "learnedAboutMWA",
                "text": "6. How did you first learn about MWA?",
                "type": "single_choice",
                "options": {
                    "literature": {"label": "Medical literature"},
                    "conference": {"label": "Conference"},
                    "colleague": {"label": "Colleague"},
                    "representative": {"label": "Medical device representative"},
                    "other-learn": {"label": "Other"},
                },
                "other_field": "learnedAboutMWAOther",
            },
            "mwaIndications": {
                "id": "mwaIndications",
                "text": "7. In your opinion, Doctor, what are the indications for MWA in thyroid treatment?",
                "type": "multi_choice",
                "options": {
                    "benign": {"label": "Benign thyroid nodules"},
                    "cysts": {"label": "Recurrent thyroid cysts"},
                    "cancer": {"label": "Thyroid cancer (selected cases)"},
                    "cosmetic": {"label": "Cosmetic concerns"},
                    "not-sure": {"label": "Not sure"},
                },
            },
            "mwaComparison": {
                "id": "mwaComparison",
                "text": "8. How would you compare MWA to other thermal ablation techniques (e.g., RFA, laser), Doctor?",
                "type": "single_choice",
                "options": {
                    "more-effective": {"label": "More effective"},
                    "equally-effective": {"label": "Equally effective"},
                    "less-effective": {"label": "Less effective"},
                    "insufficient-data": {"label": "Insufficient data"},
                },
            },
            "contraindications": {
                "id": "contraindications",
                "text": "9. What are the contraindications or limitations you associate with MWA, Doctor?",
                "type": "free_text",
                "hints": {"placeholder": "Please describe any contraindications or limitations...", "multiline": True},
            },
        },
    },
    Section.C.value: {
        "id": Section.C.value,
        "title": "Section C: Experience with MWA",
        "questions": {
            "mwaExperience": {
                "id": "mwaExperience",
                "text": "10. Have you personally performed MWA procedures, Doctor?",
                "type": "single_choice",
                "options": YES_NO,
            },
            "procedureCount": {
                "id": "procedureCount",
                "text": "11. If yes, approximately how many MWA procedures have you performed?",
                "type": "number",
                "constraints": {"min": 0, "enabled_when": {"mwaExperience": "yes"}},
                "hints": {"placeholder": "Enter number of procedures"},
            },
            "observedOutcomes": {
                "id": "observedOutcomes",
                "text": "12. What outcomes have you observed in your patients? (Select all that apply)",
                "type": "multi_choice",
                "options": {
                    "nodule-reduction": {"label": "Significant nodule reduction"},
                    "symptom-relief": {"label": "Symptom relief"},
                    "no-change": {"label": "No significant change"},
                    "complications": {"label": "Complications"},
                    "other": {"label": "Other"},
                },
            },
            "complications": {
                "id": "complications",
                "text": "13. What complications have you encountered? (Select all that apply)",
                "type": "multi_choice",
                "options": {
                    "pain": {"label": "Pain"},
                    "bleeding": {"label": "Bleeding"},
                    "infection": {"label": "Infection"},
                    "nerve-injury": {"label": "Nerve injury"},
                    "other": {"label": "Other (please specify)"},
                },
                "other_field": "complicationsOther",
            },
        },
    },
    Section.D.value: {
        "id": Section.D.value,
        "title": "Section D: Attitudes & Adoption",
        "questions": {
            "mwaViableAlternative": {
                "id": "mwaViableAlternative",
                "text": "14. Do you consider MWA a viable alternative to surgery for benign thyroid nodules?",
                "type": "single_choice",
                "options": {
                    "yes": {"label": "Yes"},
                    "no": {"label": "No"},
                    "not-sure": {"label": "Not sure"},
                },
            },
            "adoptionFactors": {
                "id": "adoptionFactors",
                "text": "15. What factors would influence your adoption of MWA? (Select all that apply)",
                "type": "multi_choice",
                "options": {
                    "training": {"label": "Availability of training"},
                    "cost": {"label": "Cost considerations"},
                    "evidence": {"label": "Clinical evidence"},
                    "peer": {"label": "Peer recommendations"},
                    "infrastructure": {"label": "Hospital infrastructure"},
                    "other": {"label": "Other"},
                },
            },
            "attendWorkshop": {
                "id": "attendWorkshop",
                "text": "16. Would you be interested in attending a workshop or training session on MWA?",
                "type": "single_choice",
                "options": YES_NO,
            },
            "additionalComments": {
                "id": "additionalComments",
                "text": "17. Additional comments or suggestions:",
                "type": "free_text",
                "hints": {"placeholder": "Please share any additional comments, Doctor...", "multiline": True},
            },
        },
    },
    Section.CONSENT.value: {
        "id": Section.CONSENT.value,
        "title": "Consent & Contact",
        "questions": _consent_questions(18),
    },
    Section.MWA_CONSENT.value: {
        "id": Section.MWA_CONSENT.value,
        "title": "Consent & Contact",
        "questions": _consent_questions(6),
    },
}

# Free-text companions of an "Other" option; they are not questions of their own.
OTHER_FIELDS: Tuple[str, ...] = tuple(
    q["other_field"]
    for section in SURVEY_DEFINITION.values()
    for q in section["questions"].values()
    if "other_field" in q
)


def _collect_questions() -> Dict[str, Dict[str, Any]]:
    questions: Dict[str, Dict[str, Any]] = {}
    for section in SURVEY_DEFINITION.values():
        for qid, question in section["questions"].items():
            questions.setdefault(qid, question)
    return questions


QUESTIONS = _collect_questions()

MULTI_SELECT_FIELDS = frozenset(
    qid for qid, q in QUESTIONS.items() if q["type"] == "multi_choice"
)

ANSWER_KEYS: Tuple[str, ...] = tuple(QUESTIONS) + OTHER_FIELDS


def vocabulary(key: str) -> List[str]:
    """Option tokens for a choice question, in display order."""
    question = QUESTIONS.get(key)
    if question is None or "options" not in question:
        raise KeyError(f"'{key}' is not a choice question")
    return list(question["options"])


def option_label(key: str, token: str) -> Optional[str]:
    option = QUESTIONS.get(key, {}).get("options", {}).get(token)
    return option["label"] if option else None


def initial_answers() -> Dict[str, Any]:
    """A fresh answer set: every key present, scalars empty, multi-selects []."""
    return {key: ([] if key in MULTI_SELECT_FIELDS else "") for key in ANSWER_KEYS}


def section_payload(section: str) -> Dict[str, Any]:
    return copy.deepcopy(SURVEY_DEFINITION[section])
