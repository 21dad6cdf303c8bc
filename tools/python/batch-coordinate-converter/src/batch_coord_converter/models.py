"""
Batch Coordinate Converter — Data Model
========================================
Immutable value types shared by the parser, projector, batch engine,
clipboard formatter and workflow state machine.

Classes:
    ProjectionKind          Geographic (degrees) or UTM (metres).
    CoordinateSystem        Projection kind + datum + zone + hemisphere.
    UTMCoordinate           Easting / northing in a UTM zone.
    GeographicCoordinate    Latitude / longitude on a datum.
    ColumnMapping           Role → column index, single owner per index.
    ConversionParameters    Zone, hemisphere and datums entered by the user.
    ConversionKind          Strategy describing one conversion direction.
    ConversionRow           Outcome of converting one pasted row.
    ConversionBatch         Ordered rows plus success tally.

The three conversion directions are instances of :class:`ConversionKind`,
registered in :data:`KINDS`::

    from batch_coord_converter.models import get_kind

    kind = get_kind("utm-to-latlng")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Mapping, Union

from shared.python.exceptions import ParameterError
from shared.python.validators import Validators

OutputFormat = Literal["decimal", "dms"]
OUTPUT_FORMATS: tuple[str, ...] = ("decimal", "dms")

METRE_DECIMALS = 2
DEGREE_DECIMALS = 8

# ---------------------------------------------------------------------------
# Datum registry — PROJ parameters appended to every CRS definition.
#   PSAD56 uses the International 1924 ellipsoid with the EPSG:1201
#   three-parameter shift to WGS84.
# ---------------------------------------------------------------------------
DATUMS: dict[str, str] = {
    "WGS84": "+datum=WGS84",
    "PSAD56": "+ellps=intl +towgs84=-288,175,-376,0,0,0,0",
}
DEFAULT_DATUM = "WGS84"


# ---------------------------------------------------------------------------
# Coordinate systems and values
# ---------------------------------------------------------------------------


class ProjectionKind(Enum):
    """Whether a coordinate system is angular (degrees) or projected (metres)."""

    GEOGRAPHIC = "geographic"
    UTM = "utm"


@dataclass(frozen=True)
class CoordinateSystem:
    """Descriptor handed to the projector for one side of a conversion.

    Attributes:
        projection: :class:`ProjectionKind` of the system.
        datum: Datum identifier, a key of :data:`DATUMS`.
        zone: UTM zone (1–60); ``None`` for geographic systems.
        hemisphere: ``"N"`` or ``"S"``; ``None`` for geographic systems.

    Construction never validates: the projector rejects bad descriptors
    per point so a bad parameter shows up as a row error, not a crash.
    """

    projection: ProjectionKind
    datum: str = DEFAULT_DATUM
    zone: int | None = None
    hemisphere: str | None = None

    @property
    def is_utm(self) -> bool:
        return self.projection is ProjectionKind.UTM

    @property
    def precision(self) -> int:
        """Decimal places kept after conversion (2 for metres, 8 for degrees)."""
        return METRE_DECIMALS if self.is_utm else DEGREE_DECIMALS

    @property
    def label(self) -> str:
        """Short human-readable name, e.g. ``"UTM 18S PSAD56"``."""
        if self.is_utm:
            return f"UTM {self.zone}{self.hemisphere or ''} {self.datum}"
        return f"Geographic {self.datum}"

    def to_proj(self) -> str:
        """Return the PROJ string for this system.

        Raises:
            ParameterError: If the datum is unknown or a UTM zone /
                hemisphere is invalid.
        """
        Validators.assert_datum_known(self.datum, DATUMS)
        datum_params = DATUMS[self.datum]
        if not self.is_utm:
            return f"+proj=longlat {datum_params} +no_defs +type=crs"

        Validators.assert_zone_valid(self.zone)
        Validators.assert_hemisphere_valid(self.hemisphere)
        south = " +south" if self.hemisphere == "S" else ""
        return (
            f"+proj=utm +zone={self.zone}{south} {datum_params} "
            "+units=m +no_defs +type=crs"
        )

    def coordinate(self, x: float, y: float) -> "Coordinate":
        """Build a coordinate in this system from an (x, y) pair, rounded to
        :attr:`precision`.

        For geographic systems ``x`` is longitude and ``y`` latitude.
        """
        digits = self.precision
        if self.is_utm:
            return UTMCoordinate(
                x=round(x, digits),
                y=round(y, digits),
                zone=self.zone,
                hemisphere=self.hemisphere,
                datum=self.datum,
            )
        return GeographicCoordinate(
            lat=round(y, digits), lng=round(x, digits), datum=self.datum
        )

    def placeholder(self) -> "Coordinate":
        """Zero-valued coordinate shown for rows that failed to convert."""
        return self.coordinate(0.0, 0.0)


@dataclass(frozen=True)
class UTMCoordinate:
    """A projected UTM position in metres."""

    x: float
    y: float
    zone: int | None
    hemisphere: str | None
    datum: str = DEFAULT_DATUM

    @property
    def xy(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def system(self) -> CoordinateSystem:
        return CoordinateSystem(
            ProjectionKind.UTM, self.datum, self.zone, self.hemisphere
        )


@dataclass(frozen=True)
class GeographicCoordinate:
    """A latitude / longitude position in decimal degrees."""

    lat: float
    lng: float
    datum: str = DEFAULT_DATUM

    @property
    def xy(self) -> tuple[float, float]:
        # Projector works in (x, y) = (longitude, latitude) order.
        return (self.lng, self.lat)

    @property
    def system(self) -> CoordinateSystem:
        return CoordinateSystem(ProjectionKind.GEOGRAPHIC, self.datum)


Coordinate = Union[UTMCoordinate, GeographicCoordinate]


# ---------------------------------------------------------------------------
# User configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnMapping:
    """Assignment of coordinate roles to zero-based column indices.

    A column index is owned by at most one role: :meth:`assign` clears any
    other role that held the index (last writer wins).

    Example::

        mapping = ColumnMapping.for_roles(("x", "y")).assign("x", 0).assign("y", 0)
        assert mapping.get("x") is None and mapping.get("y") == 0
    """

    columns: tuple[tuple[str, int | None], ...] = ()

    @classmethod
    def for_roles(cls, roles: tuple[str, ...]) -> "ColumnMapping":
        return cls(tuple((role, None) for role in roles))

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(role for role, _ in self.columns)

    def get(self, role: str) -> int | None:
        for name, index in self.columns:
            if name == role:
                return index
        raise KeyError(role)

    def assign(self, role: str, index: int | None) -> "ColumnMapping":
        """Return a new mapping with *role* set to *index*.

        Raises:
            KeyError: If *role* is not one of this mapping's roles.
        """
        if role not in self.roles:
            raise KeyError(role)
        columns = []
        for name, current in self.columns:
            if name == role:
                columns.append((name, index))
            elif index is not None and current == index:
                columns.append((name, None))
            else:
                columns.append((name, current))
        return ColumnMapping(tuple(columns))

    @property
    def is_complete(self) -> bool:
        return bool(self.columns) and all(i is not None for _, i in self.columns)

    def as_dict(self) -> dict[str, int | None]:
        return dict(self.columns)


@dataclass(frozen=True)
class ConversionParameters:
    """Projection parameters entered by the user.

    Values are stored as given; :meth:`ConversionKind.validate_parameters`
    decides whether they are complete and valid for a conversion.
    """

    zone: int | None = None
    hemisphere: str | None = None
    source_datum: str = DEFAULT_DATUM
    target_datum: str = DEFAULT_DATUM


# ---------------------------------------------------------------------------
# Conversion strategy
# ---------------------------------------------------------------------------

UTM_HEADER_VOCABULARY: tuple[str, ...] = (
    "x", "y", "easting", "northing", "este", "norte", "coord", "utm",
)
GEOGRAPHIC_HEADER_VOCABULARY: tuple[str, ...] = (
    "lat", "lng", "lon", "long", "latitude", "longitude", "coord", "x", "y",
)


@dataclass(frozen=True)
class ConversionKind:
    """One conversion direction (the strategy the workflow is built with).

    Attributes:
        name: Identifier used by the CLI, e.g. ``"utm-to-latlng"``.
        roles: Names of the two input coordinate roles, in column order
               expected by :meth:`make_source`.
        header_vocabulary: Substrings that mark the first pasted row as a
                           header for this kind of input.
        source: Projection kind of the pasted coordinates.
        target: Projection kind of the converted coordinates.
        distinct_datums: When ``True`` the source and target datums must
                         differ (datum-shift workflow).
    """

    name: str
    roles: tuple[str, str]
    header_vocabulary: tuple[str, ...]
    source: ProjectionKind
    target: ProjectionKind
    distinct_datums: bool = False

    def validate_parameters(self, params: ConversionParameters) -> None:
        """Raise if *params* are not complete and valid for this kind.

        Raises:
            ParameterError: Describing the first problem found.
        """
        if ProjectionKind.UTM in (self.source, self.target):
            Validators.assert_zone_valid(params.zone)
        if self.source is ProjectionKind.UTM:
            Validators.assert_hemisphere_valid(params.hemisphere)
        elif params.hemisphere is not None:
            # Optional here: derived from each row's latitude when unset.
            Validators.assert_hemisphere_valid(params.hemisphere)
        Validators.assert_datum_known(params.source_datum, DATUMS)
        Validators.assert_datum_known(params.target_datum, DATUMS)
        if self.distinct_datums and params.source_datum == params.target_datum:
            raise ParameterError(
                "target datum",
                params.target_datum,
                "must differ from the source datum",
            )

    def parameters_ready(self, params: ConversionParameters) -> bool:
        try:
            self.validate_parameters(params)
        except ParameterError:
            return False
        return True

    def make_source(
        self, params: ConversionParameters, first: float, second: float
    ) -> Coordinate:
        """Build the source coordinate from the two mapped cell values."""
        if self.source is ProjectionKind.UTM:
            return UTMCoordinate(
                x=first,
                y=second,
                zone=params.zone,
                hemisphere=params.hemisphere,
                datum=params.source_datum,
            )
        return GeographicCoordinate(lat=first, lng=second, datum=params.source_datum)

    def source_system(self, params: ConversionParameters) -> CoordinateSystem:
        if self.source is ProjectionKind.UTM:
            return CoordinateSystem(
                ProjectionKind.UTM, params.source_datum, params.zone, params.hemisphere
            )
        return CoordinateSystem(ProjectionKind.GEOGRAPHIC, params.source_datum)

    def target_system(
        self, params: ConversionParameters, source: Coordinate | None = None
    ) -> CoordinateSystem:
        """Target descriptor; a UTM hemisphere left unset is taken from the
        source latitude."""
        if self.target is not ProjectionKind.UTM:
            return CoordinateSystem(ProjectionKind.GEOGRAPHIC, params.target_datum)
        hemisphere = params.hemisphere
        if hemisphere is None and isinstance(source, GeographicCoordinate):
            hemisphere = "N" if source.lat >= 0 else "S"
        return CoordinateSystem(
            ProjectionKind.UTM, params.target_datum, params.zone, hemisphere or "N"
        )


UTM_TO_LATLNG = ConversionKind(
    name="utm-to-latlng",
    roles=("x", "y"),
    header_vocabulary=UTM_HEADER_VOCABULARY,
    source=ProjectionKind.UTM,
    target=ProjectionKind.GEOGRAPHIC,
)
LATLNG_TO_UTM = ConversionKind(
    name="latlng-to-utm",
    roles=("lat", "lng"),
    header_vocabulary=GEOGRAPHIC_HEADER_VOCABULARY,
    source=ProjectionKind.GEOGRAPHIC,
    target=ProjectionKind.UTM,
)
UTM_DATUM = ConversionKind(
    name="utm-datum",
    roles=("x", "y"),
    header_vocabulary=UTM_HEADER_VOCABULARY,
    source=ProjectionKind.UTM,
    target=ProjectionKind.UTM,
    distinct_datums=True,
)

KINDS: Mapping[str, ConversionKind] = {
    kind.name: kind for kind in (UTM_TO_LATLNG, LATLNG_TO_UTM, UTM_DATUM)
}


def get_kind(kind: ConversionKind | str) -> ConversionKind:
    """Resolve a kind name (or pass a :class:`ConversionKind` through).

    Raises:
        ParameterError: If *kind* is not a registered name.
    """
    if isinstance(kind, ConversionKind):
        return kind
    try:
        return KINDS[kind]
    except KeyError:
        raise ParameterError(
            "conversion kind", kind, f"choose one of {', '.join(KINDS)}"
        ) from None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversionRow:
    """Outcome of converting one pasted row.

    Exactly one of ``converted`` (when ``error`` is ``None``) or ``error``
    is meaningful; failed rows carry zero-valued placeholder coordinates.

    Attributes:
        row_number: 1-based position of the row in the parsed grid.
        original: The row's cells exactly as parsed.
        source: Coordinate read from the mapped columns.
        converted: Coordinate after projection.
        error: Failure description, or ``None`` on success.
    """

    row_number: int
    original: tuple[str, ...]
    source: Coordinate
    converted: Coordinate
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ConversionBatch:
    """All rows of one conversion run in input order, plus the success tally."""

    rows: tuple[ConversionRow, ...] = field(default_factory=tuple)
    success_count: int = 0

    @property
    def total(self) -> int:
        return len(self.rows)

    @property
    def failed_count(self) -> int:
        return self.total - self.success_count

    def summary(self) -> str:
        return f"{self.success_count}/{self.total} rows converted, {self.failed_count} failed"
