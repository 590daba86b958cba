# hrd_survey/db/base.py
from hrd_survey.db.base_class import Base  # noqa: F401

# Import every table-defining module so Base.metadata is complete
# (used by alembic autogenerate and by the test suite's create_all).
from hrd_survey.models import course  # noqa: F401
from hrd_survey.models import survey  # noqa: F401
from hrd_survey.models import response  # noqa: F401
