from sqlalchemy import Column, Integer, String, UniqueConstraint

from portal_stats.lib.database import Base


class AggregatedGroupMapping(Base):
    """
    A portal group that aggregations are partitioned by.
    The id is the identity; group_name is what reports display.
    """
    __tablename__ = 'aggr_group_mapping'

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_service = Column(String(200), nullable=False)
    group_name = Column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint('group_service', 'group_name', name='uq_aggr_group_mapping'),
    )

    @property
    def group_key(self) -> str:
        """Fully qualified key, e.g. 'local.Everyone'."""
        return f"{self.group_service}.{self.group_name}"

    def __repr__(self) -> str:
        return f"<AggregatedGroupMapping(id={self.id}, group_key='{self.group_key}')>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'group_service': self.group_service,
            'group_name': self.group_name,
        }
