from sqlalchemy import Column, Integer, String, UniqueConstraint

from portal_stats.lib.database import Base


class AggregatedTabMapping(Base):
    """
    A portal layout tab that render events were aggregated for.
    Tabs contributed by a layout fragment carry the fragment's name.
    """
    __tablename__ = 'aggr_tab_mapping'

    id = Column(Integer, primary_key=True, autoincrement=True)
    fragment_name = Column(String(200), nullable=True)
    tab_name = Column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint('fragment_name', 'tab_name', name='uq_aggr_tab_mapping'),
    )

    @property
    def display_string(self) -> str:
        if self.fragment_name:
            return f"{self.tab_name} ({self.fragment_name})"
        return self.tab_name

    def __repr__(self) -> str:
        return f"<AggregatedTabMapping(id={self.id}, display_string='{self.display_string}')>"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'fragment_name': self.fragment_name,
            'tab_name': self.tab_name,
            'display_string': self.display_string,
        }
