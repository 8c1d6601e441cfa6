"""Seed sample practice questions for development."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from medprep.core.logging import get_logger
from medprep.db.session import SessionLocal
from medprep.models.question_bank import QuestionBank, QuestionBankStatus
from medprep.schemas.question import QuestionCreate
from medprep.services.question_service import SHARED_BANK_OWNER, add_question

logger = get_logger(__name__)

DEMO_BANK_NAME = "Sample Questions"

DEMO_QUESTIONS = [
    {
        "question_text": (
            "A 45-year-old patient presents with chest pain that started 2 hours ago. The pain is "
            "described as crushing, substernal, and radiates to the left arm. ECG shows ST elevation "
            "in leads II, III, and aVF. What is the most likely diagnosis?"
        ),
        "options": [
            {"id": "a", "letter": "A", "text": "Unstable angina"},
            {"id": "b", "letter": "B", "text": "ST-elevation myocardial infarction (STEMI)"},
            {"id": "c", "letter": "C", "text": "Pericarditis"},
            {"id": "d", "letter": "D", "text": "Aortic dissection"},
        ],
        "correct_answer": "b",
        "explanation": (
            "The patient presents with classic symptoms of STEMI: crushing chest pain, radiation to "
            "left arm, and ST elevation in inferior leads (II, III, aVF). This indicates an acute "
            "occlusion of the right coronary artery."
        ),
        "subject": "Cardiology",
        "system": "Cardiovascular",
        "difficulty": "medium",
        "tags": ["STEMI", "ECG", "Chest Pain"],
    },
    {
        "question_text": (
            "A 30-year-old woman presents with a 3-day history of fever, headache, and neck stiffness. "
            "Physical examination reveals Kernig's sign and Brudzinski's sign. What is the most "
            "appropriate initial diagnostic test?"
        ),
        "options": [
            {"id": "a", "letter": "A", "text": "CT scan of the head"},
            {"id": "b", "letter": "B", "text": "Lumbar puncture"},
            {"id": "c", "letter": "C", "text": "Blood cultures"},
            {"id": "d", "letter": "D", "text": "MRI of the brain"},
        ],
        "correct_answer": "b",
        "explanation": (
            "The patient presents with classic signs of meningitis (fever, headache, neck stiffness, "
            "Kernig's and Brudzinski's signs). Lumbar puncture is the gold standard for diagnosing "
            "meningitis and should be performed immediately."
        ),
        "subject": "Neurology",
        "system": "Nervous",
        "difficulty": "easy",
        "tags": ["Meningitis", "Lumbar Puncture", "Neurological Signs"],
    },
]


def seed_demo_questions(db: Session | None = None) -> QuestionBank:
    """Create the shared sample bank if it does not exist yet."""
    owns_session = db is None
    db = db or SessionLocal()
    try:
        existing = db.execute(
            select(QuestionBank).where(
                QuestionBank.user_id == SHARED_BANK_OWNER, QuestionBank.name == DEMO_BANK_NAME
            )
        ).scalar_one_or_none()
        if existing is not None:
            logger.info("Sample questions already exist, skipping seed")
            return existing

        bank = QuestionBank(
            user_id=SHARED_BANK_OWNER,
            name=DEMO_BANK_NAME,
            description="Sample questions for trying out practice modes",
            status=QuestionBankStatus.COMPLETED.value,
            total_questions=0,
        )
        db.add(bank)
        db.flush()

        for data in DEMO_QUESTIONS:
            add_question(db, bank, QuestionCreate(**data))

        db.commit()
        db.refresh(bank)
        logger.info("Sample questions seeded", extra={"question_bank_id": str(bank.id)})
        return bank
    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding sample questions: {e}", exc_info=True)
        raise
    finally:
        if owns_session:
            db.close()
