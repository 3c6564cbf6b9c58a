from __future__ import annotations

from typing import Callable

from workforce_table.domain.models import (
    SOURCE_PRIORITY,
    EmployeeVariant,
    ExternalVariant,
    ResolvedEntity,
    SourceKind,
    SourceRecord,
    TeamVariant,
    UtilisationAggregate,
)

Branch = EmployeeVariant | ExternalVariant | TeamVariant

# Для каждого поля имени: какой атрибут читать в какой ветке.
# Ветки, отсутствующие в таблице, в этом поле не участвуют.
_FIRSTNAME_SOURCES: dict[SourceKind, Callable[[Branch], str | None]] = {
    SourceKind.EMPLOYEE: lambda b: b.firstname,
    SourceKind.EXTERNAL: lambda b: b.firstname,
    SourceKind.TEAM: lambda b: b.name,
}
_LASTNAME_SOURCES: dict[SourceKind, Callable[[Branch], str | None]] = {
    SourceKind.EMPLOYEE: lambda b: b.lastname,
    SourceKind.EXTERNAL: lambda b: b.lastname,
}


class EntityResolver:
    """
    Назначение/ответственность:
        Выбор отображаемого имени и применимого агрегата загрузки
        по фиксированному приоритету веток: employee -> external -> team.

    Контракт:
        - не бросает исключений при отсутствии данных;
        - каждое поле имени разрешается независимо (сотрудник без firstname
          уступает это поле подрядчику);
        - если агрегата нет ни в одной ветке, aggregate=None.
    """

    def __init__(self, priority: tuple[SourceKind, ...] = SOURCE_PRIORITY) -> None:
        self.priority = priority

    def resolve(self, record: SourceRecord) -> ResolvedEntity:
        firstname = self._first_present(record, _FIRSTNAME_SOURCES) or ""
        lastname = self._first_present(record, _LASTNAME_SOURCES) or ""
        display_name = f"{firstname} {lastname}".strip()

        aggregate, source = self._resolve_aggregate(record)
        return ResolvedEntity(display_name=display_name, aggregate=aggregate, source=source)

    def _first_present(
        self,
        record: SourceRecord,
        getters: dict[SourceKind, Callable[[Branch], str | None]],
    ) -> str | None:
        for kind in self.priority:
            getter = getters.get(kind)
            branch = record.branch(kind)
            if getter is None or branch is None:
                continue
            value = getter(branch)
            if value is not None:
                return value
        return None

    def _resolve_aggregate(self, record: SourceRecord) -> tuple[UtilisationAggregate | None, SourceKind | None]:
        for kind in self.priority:
            branch = record.branch(kind)
            if branch is not None and branch.utilisation is not None:
                return branch.utilisation, kind
        return None, None
