"""
Seed Data Script - Creates sample profiles and requests for local testing
Run: python -m scripts.seed_data   (from backend/)
"""
from datetime import date, timedelta

from requestdesk.repositories.mongo_client import get_collection, create_indexes
from requestdesk.domain.enums import RequestKind
from requestdesk.services.triage_service import TriageService


PROFILES = [
    {"user_id": "u-mgr-eng", "full_name": "Priya Raman", "email": "priya.raman@example.com",
     "department": "Engineering", "role": "manager"},
    {"user_id": "u-emp-1", "full_name": "Alex Chen", "email": "alex.chen@example.com",
     "department": "Engineering", "role": "employee"},
    {"user_id": "u-emp-2", "full_name": "Sam Okafor", "email": "sam.okafor@example.com",
     "department": "Engineering", "role": "employee"},
    {"user_id": "u-emp-3", "full_name": "Maria Lopez", "email": "maria.lopez@example.com",
     "department": "Finance", "role": "employee"},
]

SAMPLE_REQUESTS = [
    ("u-emp-1", RequestKind.LEAVE_APPLICATION, "Urgent sick leave, I have a fever and need to see a doctor today", 0, 1),
    ("u-emp-1", RequestKind.FUND_REQUEST, "Reimbursement for the conference travel expense, no rush", None, None),
    ("u-emp-2", RequestKind.PROMOTION_REQUEST, "Requesting a promotion review after leading the platform migration", None, None),
    ("u-emp-3", RequestKind.SPONSORSHIP_REQUEST, "Sponsorship for a certification course next quarter, whenever convenient", None, None),
]


def seed_profiles() -> None:
    profiles = get_collection("profiles")
    for profile in PROFILES:
        profiles.update_one({"user_id": profile["user_id"]}, {"$set": profile}, upsert=True)
    print(f"Upserted {len(PROFILES)} profiles")


def seed_requests() -> None:
    if get_collection("requests").count_documents({}) > 0:
        print("Requests already present. Skipping request seed.")
        return
    
    service = TriageService()
    today = date.today()
    for requester_id, kind, reason, start, length in SAMPLE_REQUESTS:
        from_date = today + timedelta(days=start) if start is not None else None
        to_date = from_date + timedelta(days=length) if from_date and length else None
        request = service.submit_request(requester_id, kind, reason, from_date, to_date)
        print(f"  {request.request_id}: {request.category.value}/{request.priority.value} ({request.triage_source.value})")


if __name__ == "__main__":
    create_indexes()
    seed_profiles()
    seed_requests()
    print("Seed complete")
