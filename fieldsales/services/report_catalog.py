"""
Schema catalog for the custom report builder.

Declares the reportable entities, their display metadata and the flat
column names a user may pick. The catalog is built once at import time and
exposed read-only; every entity listed here has a flattener registered in
``report_flatteners.FLATTENERS``.

Column names are the keys of the flattened rows (camelCase), not database
column names.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ColumnRef:
    """One selectable field: ``(table, column)``."""

    table: str
    column: str

    @property
    def key(self) -> str:
        return f"{self.table}.{self.column}"

    def to_dict(self) -> dict:
        return {"table": self.table, "column": self.column}


@dataclass(frozen=True)
class TableMeta:
    id: str
    title: str
    icon: str
    columns: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "icon": self.icon,
            "columns": list(self.columns),
        }


# ═════════════════════════════════════════════════════════════════════════════
# CATALOG DEFINITION
# ═════════════════════════════════════════════════════════════════════════════

_TABLES = (
    TableMeta(
        id="users",
        title="User (Salesman)",
        icon="user",
        columns=(
            "id", "email", "firstName", "lastName", "role", "phoneNo", "address",
            "region", "area", "isActive", "status", "reportsToManagerName", "createdAt",
        ),
    ),
    TableMeta(
        id="dealers",
        title="Dealers",
        icon="building-2",
        columns=(
            "id", "type", "name", "region", "area", "phoneNo", "address", "pinCode",
            "feedbacks", "remarks", "dealerDevelopmentStatus", "dealerDevelopmentObstacle",
            "verificationStatus", "whatsappNo", "emailId", "businessType", "gstinNo",
            "nameOfFirm", "underSalesPromoterName", "panNo", "tradeLicNo", "aadharNo",
            "godownSizeSqFt", "godownCapacityMTBags", "godownAddressLine", "godownLandMark",
            "godownDistrict", "godownArea", "godownRegion", "godownPinCode",
            "residentialAddressLine", "residentialLandMark", "residentialDistrict",
            "residentialArea", "residentialRegion", "residentialPinCode",
            "bankAccountName", "bankName", "bankBranchAddress", "bankAccountNumber",
            "bankIfscCode", "brandName", "noOfDealers", "areaCovered", "noOfEmployeesInSales",
            "declarationName", "declarationPlace", "tradeLicencePicUrl", "shopPicUrl",
            "dealerPicUrl", "blankChequePicUrl", "partnershipDeedPicUrl", "latitude",
            "longitude", "dateOfBirth", "anniversaryDate", "totalPotential", "bestPotential",
            "monthlySaleMT", "projectedMonthlySalesBestCementMT", "brandSelling",
            "declarationDate", "createdAt", "updatedAt", "associatedSalesmanName",
        ),
    ),
    TableMeta(
        id="dailyVisitReports",
        title="Daily Visit Reports",
        icon="calendar-check",
        columns=(
            "id", "reportDate", "dealerType", "dealerName", "subDealerName", "location",
            "latitude", "longitude", "visitType", "dealerTotalPotential", "dealerBestPotential",
            "brandSelling", "contactPerson", "contactPersonPhoneNo", "todayOrderMt",
            "todayCollectionRupees", "overdueAmount", "feedbacks", "solutionBySalesperson",
            "anyRemarks", "checkInTime", "checkOutTime", "timeSpentInLoc", "inTimeImageUrl",
            "outTimeImageUrl", "salesmanName", "salesmanEmail", "createdAt", "updatedAt",
        ),
    ),
    TableMeta(
        id="technicalVisitReports",
        title="Technical Visit Reports",
        icon="pencil-ruler",
        columns=(
            "id", "reportDate", "visitType", "siteNameConcernedPerson", "phoneNo", "emailId",
            "clientsRemarks", "salespersonRemarks", "checkInTime", "checkOutTime",
            "inTimeImageUrl", "outTimeImageUrl", "siteVisitBrandInUse", "siteVisitStage",
            "conversionFromBrand", "conversionQuantityValue", "conversionQuantityUnit",
            "associatedPartyName", "influencerType", "serviceType", "qualityComplaint",
            "promotionalActivity", "channelPartnerVisit", "siteVisitType",
            "dhalaiVerificationCode", "isVerificationStatus", "meetingId", "region", "area",
            "isConverted", "createdAt", "updatedAt", "salesmanName", "salesmanEmail",
        ),
    ),
    TableMeta(
        id="permanentJourneyPlans",
        title="Permanent Journey Plans (PJP)",
        icon="car",
        columns=(
            "id", "planDate", "areaToBeVisited", "description", "status", "dealerName",
            "assignedSalesmanName", "creatorName", "createdAt", "updatedAt",
        ),
    ),
    TableMeta(
        id="salesOrders",
        title="Sales Orders",
        icon="badge-indian-rupee",
        columns=(
            "id", "userId", "dealerId", "dvrId", "pjpId",
            "salesmanName", "salesmanRole",
            "dealerName", "dealerType", "dealerPhone", "dealerAddress", "area", "region",
            "orderDate", "orderPartyName",
            "partyPhoneNo", "partyArea", "partyRegion", "partyAddress",
            "deliveryDate", "deliveryArea", "deliveryRegion", "deliveryAddress", "deliveryLocPincode",
            "paymentMode", "paymentTerms", "paymentAmount", "receivedPayment",
            "receivedPaymentDate", "pendingPayment",
            "orderQty", "orderUnit",
            "itemPrice", "discountPercentage", "itemPriceAfterDiscount",
            "itemType", "itemGrade",
            "orderTotal", "estimatedDelivery", "remarks",
            "createdAt", "updatedAt",
        ),
    ),
    TableMeta(
        id="dailyTasks",
        title="Daily Tasks",
        icon="list-todo",
        columns=(
            "id", "taskDate", "visitType", "siteName", "description", "status", "pjpId",
            "assignedToName", "assignedByName", "relatedDealerName", "createdAt",
        ),
    ),
    TableMeta(
        id="competitionReports",
        title="Competition Reports",
        icon="chart-no-axes-combined",
        columns=(
            "id", "reportDate", "brandName", "billing", "nod", "retail", "schemesYesNo",
            "avgSchemeCost", "remarks", "salesmanName", "salesmanEmail", "createdAt", "updatedAt",
        ),
    ),
    TableMeta(
        id="dealerReportsAndScores",
        title="Dealer Scores",
        icon="award",
        columns=(
            "id", "dealerScore", "trustWorthinessScore", "creditWorthinessScore",
            "orderHistoryScore", "visitFrequencyScore", "lastUpdatedDate", "dealerName",
            "dealerRegion", "dealerArea", "createdAt",
        ),
    ),
    TableMeta(
        id="dealerBrandCapacities",
        title="Dealer Brand Capacities",
        icon="boxes",
        columns=(
            "id", "capacityMT", "bestCapacityMT", "brandGrowthCapacityPercent", "userId",
            "brandName", "dealerName", "dealerRegion", "dealerArea",
        ),
    ),
    TableMeta(
        id="salesmanAttendance",
        title="Salesman Attendance",
        icon="clipboard-check",
        columns=(
            "id", "attendanceDate", "locationName", "inTimeTimestamp", "outTimeTimestamp",
            "inTimeLatitude", "inTimeLongitude", "outTimeLatitude", "outTimeLongitude",
            "salesmanName", "salesmanEmail", "createdAt",
        ),
    ),
    TableMeta(
        id="salesmanLeaveApplications",
        title="Leave Applications",
        icon="bandage",
        columns=(
            "id", "leaveType", "startDate", "endDate", "reason", "status", "adminRemarks",
            "salesmanName", "salesmanEmail", "approverName", "createdAt",
        ),
    ),
    TableMeta(
        id="geoTracking",
        title="Salesman GeoTracking",
        icon="map-pin",
        columns=(
            "id", "latitude", "longitude", "recordedAt", "accuracy", "speed", "activityType",
            "appState", "batteryLevel", "salesmanName", "salesmanEmail", "journeyId", "createdAt",
        ),
    ),
    TableMeta(
        id="salesmanRating",
        title="Salesman Rating",
        icon="star",
        columns=("id", "area", "region", "rating", "salesmanName", "salesmanEmail"),
    ),
)

CATALOG: MappingProxyType = MappingProxyType({t.id: t for t in _TABLES})


# ═════════════════════════════════════════════════════════════════════════════
# LOOKUPS
# ═════════════════════════════════════════════════════════════════════════════

def list_tables() -> list[TableMeta]:
    """All reportable entities, in display order."""
    return list(_TABLES)


def get_table_meta(table_id: str) -> TableMeta | None:
    return CATALOG.get(table_id)


def is_known_table(table_id: str) -> bool:
    return table_id in CATALOG


def columns_for(table_id: str) -> tuple[str, ...]:
    """Column names for ``table_id``; empty tuple for unknown ids."""
    meta = CATALOG.get(table_id)
    return meta.columns if meta else ()


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def humanize_column(column: str) -> str:
    """Display header for a flat column name.

    >>> humanize_column("totalPotential")
    'Total Potential'
    >>> humanize_column("godownCapacityMTBags")
    'Godown Capacity MT Bags'
    """
    words = _CAMEL_BOUNDARY.sub(" ", column).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)
