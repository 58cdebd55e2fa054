# rotrain/data/membranes.py
# Built-in element catalog (nominal test conditions from the vendor datasheets)
# flow_m3d: nominal permeate flow, salt_rejection_pct: nominal rejection,
# test_pressure_psi: datasheet test pressure

MEMBRANES = [
    # Brackish Water RO
    {
        "id": "zekindo-ulp-4040",
        "name": "ZEKINDO ULP-4040",
        "vendor": "ZEKINDO",
        "family": "bwro",
        "type": "ULP",
        "size": "4040",
        "flow_m3d": 9.5,
        "salt_rejection_pct": 99.3,
        "test_pressure_psi": 150,
    },
    {
        "id": "zekindo-ulp-8040-400",
        "name": "ZEKINDO ULP-8040-400",
        "vendor": "ZEKINDO",
        "family": "bwro",
        "type": "ULP",
        "size": "8040",
        "flow_m3d": 39.7,
        "salt_rejection_pct": 99.5,
        "test_pressure_psi": 150,
    },
    {
        "id": "zekindo-bw-4040",
        "name": "ZEKINDO BW-4040",
        "vendor": "ZEKINDO",
        "family": "bwro",
        "type": "BW",
        "size": "4040",
        "flow_m3d": 9.1,
        "salt_rejection_pct": 99.65,
        "test_pressure_psi": 255,
    },
    # Sea Water RO
    {
        "id": "zekindo-sw-4040",
        "name": "ZEKINDO SW-4040",
        "vendor": "ZEKINDO",
        "family": "swro",
        "type": "SW",
        "size": "4040",
        "flow_m3d": 4.5,
        "salt_rejection_pct": 99.6,
        "test_pressure_psi": 800,
    },
    {
        "id": "zekindo-sw-400-hr",
        "name": "ZEKINDO SW-400 HR",
        "vendor": "ZEKINDO",
        "family": "swro",
        "type": "SW",
        "size": "8040",
        "flow_m3d": 26.0,
        "salt_rejection_pct": 99.7,
        "test_pressure_psi": 800,
    },
]
