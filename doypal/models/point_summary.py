from sqlalchemy import Column, Integer, MetaData, Table
from sqlalchemy.dialects.postgresql import UUID

# Database view maintained by migrations; kept out of Base.metadata so
# create_all never materialises it as a table.
view_metadata = MetaData()

point_summaries = Table(
    "point_summaries",
    view_metadata,
    Column("profile_id", UUID(as_uuid=True)),
    Column("total_points", Integer),
    Column("weekly_points", Integer),
    Column("monthly_points", Integer),
)
