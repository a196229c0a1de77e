# seed.py
# Demo organisation loaded when the app starts (SEED_DEMO_DATA=True).
# Plain dicts; OrgStore.seeded() turns them into models.

from .core.config import ADMIN_USER_ID, ZONAL_MANAGER_USER_ID, NA

zones = [
    {"id": "zone-1", "name": "Zone-1"},
    {"id": "zone-2", "name": "Zone-2"},
    {"id": "zone-3", "name": "Zone-3"},
    {"id": "zone-4", "name": "Zone-4"},
    {"id": "zone-5", "name": "Zone-5"},
]

regions = [
    {"id": "region-1", "name": "Region-1", "zone_id": "zone-1"},
    {"id": "region-2", "name": "Region-2", "zone_id": "zone-1"},
    {"id": "region-3", "name": "Region-3", "zone_id": "zone-2"},
    {"id": "region-4", "name": "Region-4", "zone_id": "zone-2"},
    {"id": "region-5", "name": "Region-5", "zone_id": "zone-3"},
]

districts = [
    {"id": "district-1", "name": "YAVATMAL", "region_id": "region-2"},
    {"id": "district-2", "name": "NAGPUR", "region_id": "region-1"},
    {"id": "district-3", "name": "AMRAVATI", "region_id": "region-2"},
    {"id": "district-4", "name": "NANDED", "region_id": "region-2"},
    {"id": "district-5", "name": "AKOLA", "region_id": "region-1"},
]

branches = [
    {"id": "branch-1", "branch_name": "DIGRAS", "zone": "Zone-1", "region": "Region-2", "district_name": "YAVATMAL"},
    {"id": "branch-2", "branch_name": "NAGPUR", "zone": "Zone-1", "region": "Region-2", "district_name": "NAGPUR"},
    {"id": "branch-3", "branch_name": "NER", "zone": "Zone-1", "region": "Region-2", "district_name": "YAVATMAL"},
    {"id": "branch-4", "branch_name": "UMARKHED", "zone": "Zone-1", "region": "Region-2", "district_name": "YAVATMAL"},
    {"id": "branch-5", "branch_name": "YAVATMAL", "zone": "Zone-1", "region": "Region-2", "district_name": "YAVATMAL"},
]

# Records behind the two system logins; always present in a store
system_staff = [
    {
        "id": ADMIN_USER_ID, "employee_code": "ADMIN", "employee_name": "System Admin",
        "function": "ADMINISTRATOR", "branch_name": NA, "contact_number": "9923444173",
    },
    {
        "id": ZONAL_MANAGER_USER_ID, "employee_code": "ZM001", "employee_name": "Zonal Manager",
        "function": "ZONAL MANAGER", "branch_name": "NAGPUR", "contact_number": "9923444174",
        "managed_zones": ["Zone-1"],
    },
]

staff = [
#--------------------------------------- ZONE-1 / YAVATMAL --------------------------------------------#
    {
        "id": "staff-1", "employee_code": "100", "employee_name": "NISHANT SHELARE",
        "function": "ZONAL MANAGER", "branch_name": "NAGPUR", "contact_number": "9876543210",
        "managed_zones": ["Zone-1", "Zone-2"],
    },
    {
        "id": "staff-2", "employee_code": "270", "employee_name": "GAURAV WAKODIKAR",
        "function": "SENIOR DISTRICT HEAD", "branch_name": "YAVATMAL", "contact_number": "8765432109",
        "managed_branches": ["NER", "UMARKHED", "DIGRAS", "YAVATMAL"],
        "reports_to_employee_code": "100",
    },
    {
        "id": "staff-3", "employee_code": "2003", "employee_name": "AMOL JAGTAP",
        "function": "ASSISTANT DISTRICT HEAD", "branch_name": "UMARKHED", "contact_number": "7654321098",
        "managed_branches": ["NER", "UMARKHED", "DIGRAS"],
        "reports_to_employee_code": "270",
    },
    {
        "id": "staff-4", "employee_code": "1734", "employee_name": "PANKAJ MEHAKAR",
        "function": "BRANCH MANAGER", "branch_name": "NER", "contact_number": "9000011111",
        "reports_to_employee_code": "270",
    },
    {
        "id": "staff-5", "employee_code": "2266", "employee_name": "TRISHUL KOSHTI",
        "function": "ASSISTANT BRANCH MANAGER", "branch_name": "NER", "contact_number": "9000011112",
        "reports_to_employee_code": "1734",
    },
    {
        "id": "staff-6", "employee_code": "1347", "employee_name": "SUSHIL GAIKWAD",
        "function": "BRANCH MANAGER", "branch_name": "DIGRAS", "contact_number": "9000011113",
        "reports_to_employee_code": "270",
    },
    {
        "id": "staff-7", "employee_code": "3531", "employee_name": "VIJENDRA PATMASE",
        "function": "SALES MANAGER-CASA", "branch_name": "NER", "contact_number": "9876512345",
        "reports_to_employee_code": "270",
    },
    {
        "id": "staff-8", "employee_code": "2004", "employee_name": "NILESH INGALE",
        "function": "SALES MANAGER-DDS", "branch_name": "YAVATMAL", "contact_number": "9876512346",
        "reports_to_employee_code": "270",
    },
    {
        "id": "staff-9", "employee_code": "3937", "employee_name": "DATTA GIRI",
        "function": "BUSINESS DEVELOPMENT EXECUTIVE", "branch_name": "NER", "contact_number": "9988776611",
        "reports_to_employee_code": "1734",
    },
]
