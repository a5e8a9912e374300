"""Destination catalog — IATA city codes with country and region lookups."""

from dataclasses import dataclass

# ISO-2 country → region
COUNTRY_TO_REGION: dict[str, str] = {
    # Asia
    "IN": "Asia", "AE": "Asia", "SA": "Asia", "OM": "Asia", "BH": "Asia", "QA": "Asia",
    "KW": "Asia", "NP": "Asia", "LK": "Asia", "BD": "Asia", "PK": "Asia", "BT": "Asia",
    "MV": "Asia", "TH": "Asia", "SG": "Asia", "MY": "Asia", "ID": "Asia", "PH": "Asia",
    "VN": "Asia", "KH": "Asia", "LA": "Asia", "CN": "Asia", "JP": "Asia", "KR": "Asia",
    "TW": "Asia", "HK": "Asia", "MO": "Asia", "JO": "Asia", "IL": "Asia", "LB": "Asia",
    # Europe
    "TR": "Europe", "FR": "Europe", "DE": "Europe", "ES": "Europe", "PT": "Europe",
    "IT": "Europe", "GR": "Europe", "NL": "Europe", "BE": "Europe", "LU": "Europe",
    "IE": "Europe", "GB": "Europe", "CH": "Europe", "AT": "Europe", "CZ": "Europe",
    "SK": "Europe", "PL": "Europe", "HU": "Europe", "SE": "Europe", "NO": "Europe",
    "FI": "Europe", "DK": "Europe", "IS": "Europe", "RO": "Europe", "BG": "Europe",
    "HR": "Europe", "SI": "Europe", "RS": "Europe", "BA": "Europe", "MK": "Europe",
    "AL": "Europe", "UA": "Europe", "LT": "Europe", "LV": "Europe", "EE": "Europe",
    "MT": "Europe", "CY": "Europe",
    # North America
    "US": "North America", "CA": "North America", "MX": "North America",
    # South America
    "BR": "South America", "AR": "South America", "CL": "South America",
    "PE": "South America", "CO": "South America", "UY": "South America",
    "EC": "South America", "BO": "South America", "PY": "South America",
    "VE": "South America",
    # Africa
    "EG": "Africa", "MA": "Africa", "DZ": "Africa", "TN": "Africa", "ZA": "Africa",
    "KE": "Africa", "TZ": "Africa", "ET": "Africa", "NG": "Africa", "GH": "Africa",
    "SN": "Africa", "RW": "Africa", "MU": "Africa", "SC": "Africa",
    # Oceania
    "AU": "Oceania", "NZ": "Oceania", "FJ": "Oceania", "PG": "Oceania",
}

# (IATA, city, ISO-2 country)
CATALOG: list[tuple[str, str, str]] = [
    ("DEL", "Delhi", "IN"),
    ("BOM", "Mumbai", "IN"),
    ("BLR", "Bengaluru", "IN"),
    ("MAA", "Chennai", "IN"),
    ("HYD", "Hyderabad", "IN"),
    ("CCU", "Kolkata", "IN"),
    ("COK", "Kochi", "IN"),
    ("GOI", "Goa", "IN"),
    ("PNQ", "Pune", "IN"),
    ("AMD", "Ahmedabad", "IN"),
    ("JAI", "Jaipur", "IN"),
    ("LKO", "Lucknow", "IN"),
    ("ATQ", "Amritsar", "IN"),
    ("IXC", "Chandigarh", "IN"),
    ("BBI", "Bhubaneswar", "IN"),
    ("PAT", "Patna", "IN"),
    ("VNS", "Varanasi", "IN"),
    ("BHO", "Bhopal", "IN"),
    ("IDR", "Indore", "IN"),
    ("RPR", "Raipur", "IN"),
    ("NAG", "Nagpur", "IN"),
    ("TRV", "Thiruvananthapuram", "IN"),
    ("CCJ", "Kozhikode", "IN"),
    ("IXM", "Madurai", "IN"),
    ("CJB", "Coimbatore", "IN"),
    ("VTZ", "Visakhapatnam", "IN"),
    ("VGA", "Vijayawada", "IN"),
    ("IXE", "Mangaluru", "IN"),
    ("GAU", "Guwahati", "IN"),
    ("DED", "Dehradun", "IN"),
    ("SXR", "Srinagar", "IN"),
    ("IXL", "Leh", "IN"),
    ("IXZ", "Port Blair", "IN"),
    ("UDR", "Udaipur", "IN"),
    ("STV", "Surat", "IN"),
    ("BDQ", "Vadodara", "IN"),
    ("AGR", "Agra", "IN"),
    ("JLR", "Jabalpur", "IN"),
    ("RAJ", "Rajkot", "IN"),
    ("IXA", "Agartala", "IN"),
    ("IXB", "Bagdogra", "IN"),
    ("IXR", "Ranchi", "IN"),
    ("DIB", "Dibrugarh", "IN"),
    ("IMF", "Imphal", "IN"),
    ("SHL", "Shillong", "IN"),
    ("DXB", "Dubai", "AE"),
    ("AUH", "Abu Dhabi", "AE"),
    ("DOH", "Doha", "QA"),
    ("MCT", "Muscat", "OM"),
    ("RUH", "Riyadh", "SA"),
    ("JED", "Jeddah", "SA"),
    ("BKK", "Bangkok", "TH"),
    ("HKT", "Phuket", "TH"),
    ("SIN", "Singapore", "SG"),
    ("KUL", "Kuala Lumpur", "MY"),
    ("DPS", "Bali", "ID"),
    ("CGK", "Jakarta", "ID"),
    ("HAN", "Hanoi", "VN"),
    ("SGN", "Ho Chi Minh City", "VN"),
    ("MNL", "Manila", "PH"),
    ("HKG", "Hong Kong", "HK"),
    ("TPE", "Taipei", "TW"),
    ("ICN", "Seoul", "KR"),
    ("NRT", "Tokyo", "JP"),
    ("KIX", "Osaka", "JP"),
    ("PEK", "Beijing", "CN"),
    ("PVG", "Shanghai", "CN"),
    ("LHR", "London", "GB"),
    ("LGW", "London (Gatwick)", "GB"),
    ("MAN", "Manchester", "GB"),
    ("EDI", "Edinburgh", "GB"),
    ("CDG", "Paris", "FR"),
    ("NCE", "Nice", "FR"),
    ("AMS", "Amsterdam", "NL"),
    ("BRU", "Brussels", "BE"),
    ("FRA", "Frankfurt", "DE"),
    ("MUC", "Munich", "DE"),
    ("BER", "Berlin", "DE"),
    ("ZRH", "Zurich", "CH"),
    ("GVA", "Geneva", "CH"),
    ("VIE", "Vienna", "AT"),
    ("PRG", "Prague", "CZ"),
    ("BUD", "Budapest", "HU"),
    ("WAW", "Warsaw", "PL"),
    ("CPH", "Copenhagen", "DK"),
    ("ARN", "Stockholm", "SE"),
    ("OSL", "Oslo", "NO"),
    ("BCN", "Barcelona", "ES"),
    ("MAD", "Madrid", "ES"),
    ("LIS", "Lisbon", "PT"),
    ("FCO", "Rome", "IT"),
    ("MXP", "Milan", "IT"),
    ("ATH", "Athens", "GR"),
    ("IST", "Istanbul", "TR"),
    ("DUB", "Dublin", "IE"),
    ("KEF", "Reykjavík", "IS"),
    ("VCE", "Venice", "IT"),
    ("JFK", "New York", "US"),
    ("EWR", "Newark", "US"),
    ("LAX", "Los Angeles", "US"),
    ("SFO", "San Francisco", "US"),
    ("ORD", "Chicago", "US"),
    ("SEA", "Seattle", "US"),
    ("MIA", "Miami", "US"),
    ("MCO", "Orlando", "US"),
    ("DFW", "Dallas–Fort Worth", "US"),
    ("IAH", "Houston", "US"),
    ("BOS", "Boston", "US"),
    ("IAD", "Washington, DC", "US"),
    ("YYZ", "Toronto", "CA"),
    ("YVR", "Vancouver", "CA"),
    ("YUL", "Montréal", "CA"),
    ("MEX", "Mexico City", "MX"),
    ("GRU", "São Paulo", "BR"),
    ("GIG", "Rio de Janeiro", "BR"),
    ("EZE", "Buenos Aires", "AR"),
    ("SCL", "Santiago", "CL"),
    ("LIM", "Lima", "PE"),
    ("BOG", "Bogotá", "CO"),
    ("UIO", "Quito", "EC"),
    ("CAI", "Cairo", "EG"),
    ("CMN", "Casablanca", "MA"),
    ("RAK", "Marrakesh", "MA"),
    ("ADD", "Addis Ababa", "ET"),
    ("NBO", "Nairobi", "KE"),
    ("ZNZ", "Zanzibar", "TZ"),
    ("JNB", "Johannesburg", "ZA"),
    ("CPT", "Cape Town", "ZA"),
    ("KGL", "Kigali", "RW"),
    ("MRU", "Mauritius", "MU"),
    ("SEZ", "Seychelles", "SC"),
    ("SYD", "Sydney", "AU"),
    ("MEL", "Melbourne", "AU"),
    ("BNE", "Brisbane", "AU"),
    ("PER", "Perth", "AU"),
    ("AKL", "Auckland", "NZ"),
    ("ZQN", "Queenstown", "NZ"),
    ("NAN", "Nadi", "FJ"),
]


@dataclass(frozen=True)
class Destination:
    iata: str
    city: str
    country: str
    region: str

    def to_dict(self) -> dict:
        return {
            "destinationIata": self.iata,
            "cityName": self.city,
            "country": self.country,
            "region": self.region,
        }


def region_of(country: str) -> str:
    return COUNTRY_TO_REGION.get(country, "Other")


DESTINATIONS: list[Destination] = [
    Destination(iata, city, country, region_of(country)) for iata, city, country in CATALOG
]

IATA_COUNTRY: dict[str, str] = {d.iata: d.country for d in DESTINATIONS}


def is_domestic_pair(a: str, b: str) -> bool:
    """True when both codes are in the catalog and share a country."""
    ca = IATA_COUNTRY.get((a or "").upper())
    cb = IATA_COUNTRY.get((b or "").upper())
    return bool(ca and cb and ca == cb)


def resolve_city_to_iata(city_like: str | None) -> str | None:
    """Match free text to a catalog code: exact city, substring, prefix, then code."""
    if not city_like:
        return None
    target = city_like.strip().lower()
    if not target:
        return None
    for d in DESTINATIONS:
        if d.city.lower() == target:
            return d.iata
    for d in DESTINATIONS:
        if target in d.city.lower():
            return d.iata
    for d in DESTINATIONS:
        if d.city.lower().startswith(target):
            return d.iata
    for d in DESTINATIONS:
        if d.iata.lower() == target:
            return d.iata
    return None


def list_catalog(
    q: str = "",
    region: str = "",
    country: str = "",
    limit: int = 300,
) -> list[dict]:
    q = q.strip().lower()
    region = region.strip()
    country = country.strip().upper()

    items = DESTINATIONS
    if q:
        items = [d for d in items if q in d.city.lower() or q in d.iata.lower()]
    if region:
        items = [d for d in items if d.region == region]
    if country:
        items = [d for d in items if d.country == country]

    items = sorted(items, key=lambda d: d.region + d.city)
    return [d.to_dict() for d in items[:limit]]


def suggest(q: str, limit: int = 12) -> list[dict]:
    """Rank catalog entries for autocomplete; queries under 2 chars return nothing."""
    q = q.strip().lower()
    if len(q) < 2:
        return []

    matches = []
    for d in DESTINATIONS:
        city = d.city.lower()
        code = d.iata.lower()
        if city.startswith(q):
            score = 100
        elif code.startswith(q):
            score = 90
        elif q in city:
            score = 70
        elif q in code:
            score = 60
        else:
            continue
        matches.append({
            "id": d.iata,
            "code": d.iata,
            "city": d.city,
            "country": d.country,
            "region": d.region,
            "label": f"{d.city}, {d.country} • {d.iata}",
            "score": score,
        })

    matches.sort(key=lambda m: (-m["score"], m["city"]))
    return matches[:limit]
