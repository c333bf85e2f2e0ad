# leave_manager/seed_demo.py
"""
Fill the requests table with random demo data.

    python -m leave_manager.seed_demo [count]
"""
import logging
import random
import sys
import uuid
from datetime import date, timedelta

from sqlalchemy.orm import Session

from leave_manager.leaves.models import LeaveRequest
from leave_manager.schemas.leave_schema import Department, LeaveType, RequestStatus

log = logging.getLogger(__name__)

POSITIONS = ["사원", "대리", "과장", "차장", "부장"]
NAMES = ["김철수", "이영희", "박민수", "최지훈", "정은지", "한지원", "오상민", "유지현", "조민아", "강호준"]
# Approved rows need approver data, so demo rows never start approved
DEMO_STATUSES = [s.value for s in RequestStatus if s is not RequestStatus.APPROVED]


def random_date_within_last_days(days: int = 90, today=None) -> date:
    today = today or date.today()
    return today - timedelta(days=random.randint(0, days))


def seed_requests(db: Session, count: int = 100) -> int:
    for _ in range(count):
        a, b = random_date_within_last_days(), random_date_within_last_days()
        start, end = min(a, b), max(a, b)
        db.add(LeaveRequest(
            request_id=str(uuid.uuid4()),
            date_requested=random_date_within_last_days(),
            emp_id="E" + str(random.randint(0, 999)).zfill(4),
            name=random.choice(NAMES),
            dept=random.choice(list(Department)).value,
            position=random.choice(POSITIONS),
            leave_type=random.choice(list(LeaveType)).value,
            start_date=start,
            end_date=end,
            note="테스트 데이터",
            status=random.choice(DEMO_STATUSES),
        ))
    db.commit()
    log.info("%s demo rows inserted", count)
    return count


if __name__ == "__main__":
    from leave_manager.bootstrap import init_db
    from leave_manager.database import engine

    logging.basicConfig(level=logging.INFO)
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 100
    init_db(engine)
    with Session(engine) as session:
        seed_requests(session, n)
