"""
Fixed monitoring-station tables.

Each station has a stable index-derived id, a position, and a baseline
value used by synthetic mode (°C, metres, pH, or magnitude depending on the
table). Live mode uses the same positions to query point-based upstream APIs.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    station_id: str
    name: str
    lat: float
    lng: float
    baseline: float


def _table(prefix: str, rows: list[tuple[str, float, float, float]]) -> tuple[Station, ...]:
    return tuple(
        Station(station_id=f"{prefix}_{i}", name=name, lat=lat, lng=lng, baseline=base)
        for i, (name, lat, lng, base) in enumerate(rows)
    )


# Surface temperature, baseline °C
THERMAL_STATIONS = _table("nasa", [
    # Dhaka heat-island detail
    ("Old Dhaka (Puran Dhaka)",   23.7104, 90.4074, 41),
    ("Dhanmondi",                 23.7461, 90.3742, 38),
    ("Segunbagicha",              23.7387, 90.3938, 37),
    ("Gulshan",                   23.7806, 90.4147, 39),
    ("Banani",                    23.7937, 90.4026, 38),
    ("Baridhara",                 23.8103, 90.4125, 36),
    ("Bashundhara R/A",           23.8075, 90.4286, 35),
    ("Uttara",                    23.8759, 90.3795, 37),
    ("Farmgate",                  23.7581, 90.3872, 42),
    ("Motijheel",                 23.7337, 90.4084, 43),
    ("Tejgaon",                   23.7806, 90.3881, 44),
    ("Ramna",                     23.7389, 90.4008, 33),
    ("Mirpur",                    23.8223, 90.3654, 40),
    # Extended metro
    ("Dhaka Cantonment",          23.7805, 90.3492, 36),
    ("Hazrat Shahjalal Airport",  23.8506, 90.3917, 39),
    ("Keraniganj",                23.6850, 90.3563, 38),
    ("Savar",                     23.8836, 90.3331, 36),
    ("Gazipur",                   23.9006, 90.3876, 37),
    # Major cities
    ("Chittagong Port City",      22.3475, 91.8123, 36),
    ("Rajshahi City Center",      24.3745, 88.6042, 41),
    ("Sylhet City",               24.8949, 91.8687, 35),
    ("Khulna City",               22.8456, 89.5403, 38),
    ("Mymensingh City",           24.7471, 90.4203, 37),
    ("Comilla City",              23.1793, 91.1511, 39),
    # Coastal
    ("Cox Bazar Beach",           22.4569, 91.9694, 32),
    ("Barisal Coastal",           22.7010, 90.3535, 34),
    ("Satkhira Coast",            22.3596, 89.1145, 35),
    ("Rangamati Lake",            22.1455, 91.6597, 33),
    # Industrial
    ("Chittagong Port Industrial", 22.2637, 91.7159, 40),
    ("Tejgaon Industrial",        23.7806, 90.3881, 44),
    ("Bogura Industrial",         24.4539, 88.9318, 42),
    # Agricultural
    ("Rangpur Agricultural",      25.7439, 89.2752, 36),
    ("Dinajpur Farmlands",        24.8949, 89.3720, 35),
    ("Jessore Rice Fields",       22.7010, 89.2535, 37),
    ("Faridpur Plains",           23.1634, 89.2182, 38),
    # Hills
    ("Habiganj Hills",            24.6331, 91.6869, 32),
    ("Sherpur Hills",             25.0968, 90.1134, 33),
    ("Rangamati Hills",           22.1455, 91.6597, 31),
    # Wetlands
    ("Sunamganj Wetlands",        25.1278, 91.8336, 34),
    ("Jamalpur Floodplains",      24.8036, 90.6802, 36),
    ("Bagerhat Mangrove",         22.5791, 89.6880, 33),
])

# River / coastal gauges, baseline water level in metres
HYDRO_STATIONS = _table("gauge", [
    ("Chittagong Port",       22.3475, 91.8123, 5.2),
    ("Khulna Coastal",        22.7172, 89.6830, 6.8),
    ("Sylhet Haor",           24.8949, 91.8687, 4.5),
    ("Sunamganj Wetlands",    25.1278, 91.8336, 7.2),
    ("Jamalpur Brahmaputra",  24.8036, 90.6802, 6.1),
    ("Dhaka Buriganga",       23.6850, 90.3563, 4.8),
    ("Barisal Delta",         22.7010, 90.3535, 5.9),
    ("Cox Bazar Coast",       22.4569, 91.9694, 3.2),
    ("Satkhira Coast",        22.3596, 89.1145, 8.1),
    ("Bagerhat Mangrove",     22.5791, 89.6880, 7.4),
    ("Faridpur Padma",        23.1634, 89.2182, 5.7),
    ("Habiganj River",        24.6331, 91.6869, 4.3),
    ("Rangamati Lake",        22.1455, 91.6597, 6.5),
    ("Sherpur Brahmaputra",   25.0968, 90.1134, 5.8),
    ("Netrokona Floodplains", 24.4539, 90.7814, 6.9),
])

# Topsoil sample sites, baseline pH
SOIL_STATIONS = _table("nasa", [
    # Dhaka urban soils
    ("Old Dhaka (Puran Dhaka)", 23.7104, 90.4074, 6.2),
    ("Dhanmondi",               23.7461, 90.3742, 6.8),
    ("Segunbagicha",            23.7387, 90.3938, 7.0),
    ("Gulshan",                 23.7806, 90.4147, 7.2),
    ("Banani",                  23.7937, 90.4026, 7.1),
    ("Baridhara",               23.8103, 90.4125, 7.3),
    ("Bashundhara R/A",         23.8075, 90.4286, 7.5),
    ("Uttara",                  23.8759, 90.3795, 7.0),
    ("Farmgate",                23.7581, 90.3872, 6.5),
    ("Motijheel",               23.7337, 90.4084, 6.3),
    ("Tejgaon",                 23.7806, 90.3881, 6.4),
    ("Ramna",                   23.7389, 90.4008, 7.8),
    ("Mirpur",                  23.8223, 90.3654, 6.7),
    # Extended metro
    ("Dhaka Cantonment",        23.7805, 90.3492, 7.4),
    ("Airport Area",            23.8506, 90.3917, 6.9),
    ("Keraniganj",              23.6850, 90.3563, 6.8),
    ("Savar",                   23.8836, 90.3331, 7.1),
    ("Gazipur",                 23.9006, 90.3876, 7.0),
    # Chittagong division, coastal salinity
    ("Chittagong Port City",    22.3475, 91.8123, 8.2),
    ("Cox Bazar Coast",         22.4569, 91.9694, 8.5),
    ("Chittagong Hills",        22.2637, 91.7159, 6.9),
    ("Rangamati Hills",         22.1455, 91.6597, 5.9),
    ("Comilla Plains",          23.1793, 91.1511, 7.2),
    ("Noakhali Delta",          22.8456, 91.1115, 8.4),
    # Sylhet division, tea gardens and wetlands
    ("Sylhet Tea Gardens",      24.8949, 91.8687, 5.8),
    ("Moulvibazar Tea Estate",  24.7471, 91.9398, 5.5),
    ("Sunamganj Wetlands",      25.1278, 91.8336, 7.3),
    ("Habiganj Hills",          24.6331, 91.6869, 6.1),
    # Rajshahi / Rangpur agriculture
    ("Rajshahi Agriculture",    24.3745, 88.6042, 7.5),
    ("Bogura Farming",          24.4539, 88.9318, 7.2),
    ("Rangpur Agriculture",     25.7439, 89.2752, 6.8),
    ("Dinajpur Fields",         24.8949, 89.3720, 7.3),
    ("Panchagarh Border",       25.1074, 88.2779, 7.0),
    ("Thakurgaon Rural",        24.7471, 89.2754, 7.1),
    # Khulna division, Sundarbans and coast
    ("Khulna Sundarbans",       22.8456, 89.5403, 8.0),
    ("Barisal Delta",           22.7010, 90.3535, 7.8),
    ("Satkhira Coast",          22.3596, 89.1145, 8.3),
    ("Jessore Agriculture",     22.7010, 89.2535, 7.4),
    ("Faridpur Plains",         23.1634, 89.2182, 7.2),
    ("Bagerhat Mangrove",       22.5791, 89.6880, 8.1),
    # Mymensingh river basins
    ("Mymensingh Agricultural", 24.7471, 90.4203, 7.0),
    ("Sherpur Hills",           25.0968, 90.1134, 6.7),
    ("Netrokona Wetlands",      24.4539, 90.7814, 7.5),
    ("Jamalpur Floodplains",    24.8036, 90.6802, 7.3),
])

# Synthetic epicentre zones, baseline is unused (magnitude is drawn per cycle)
SEISMIC_ZONES = _table("synthetic", [
    ("Near Chittagong",  22.50, 91.90, 0.0),
    ("Bay of Bengal",    20.90, 90.60, 0.0),
    ("Near Sylhet",      24.95, 91.95, 0.0),
    ("Assam Border",     25.60, 91.20, 0.0),
    ("Myanmar Border",   21.90, 92.40, 0.0),
    ("Near Rangpur",     25.80, 89.30, 0.0),
])
