import random

from faker import Faker

from backend.config import get_settings
from backend.database import get_sessionmaker, init_db
from backend.services.batch_processor import BatchProcessor
from backend.services.validators import VisitRecord

fake = Faker("en_IN")

DEPARTMENTS = [
    "General Medicine",
    "ENT",
    "Cardiology",
    "Orthopaedics",
    "Dermatology",
    "Paediatrics",
    "Ophthalmology",
    "Gynaecology",
    "Neurology",
    "Dental",
]


def generate_synthetic_visits(count: int = 100) -> list[VisitRecord]:
    """Build ``count`` patients with 1-4 department visits each, in visit order."""
    visits: list[VisitRecord] = []
    for _ in range(count):
        identifier = fake.numerify(text="%###########")
        patient = {
            "name": fake.name(),
            "age": random.randint(1, 90),
            "gender": random.choice(["Male", "Female", "Other"]),
            "address": fake.address().replace("\n", ", "),
            "phone": fake.numerify(text="9#########"),
        }
        for department in random.sample(DEPARTMENTS, k=random.randint(1, 4)):
            visits.append(VisitRecord(identifier=identifier, department=department, **patient))
    random.shuffle(visits)
    return visits


if __name__ == "__main__":
    settings = get_settings()
    if settings.ENVIRONMENT != "dev" or not settings.SYNTHETIC_DATA_MODE:
        raise SystemExit("Synthetic data generation is only permitted in dev with SYNTHETIC_DATA_MODE=true")

    init_db()
    db = get_sessionmaker()()
    try:
        result = BatchProcessor(db).process(generate_synthetic_visits(count=100))
    finally:
        db.close()

    print(
        f"Synthetic data generation complete: {result.new_count} new, "
        f"{result.updated_count} updated, {len(result.errors)} failed"
    )
