import pytest


SAMPLE_REPORT = """\
lmutil - Copyright (c) 1989-2019 Flexera Software LLC. All Rights Reserved.
Flexible License Manager status on Thu 6/26/2025 16:30

License server status: 5280@narmada
    License file(s) on narmada: /opt/licenses/acme.lic:

   narmada: license server UP (MASTER) v11.16.2

Vendor daemon status (on narmada):

     acme: UP v11.16.2
Feature usage info:

Users of RTL_Compiler:  (Total of 10 licenses issued;  Total of 3 licenses in use)

  "RTL_Compiler" v23.1, vendor: acme, expiry: 06-aug-2025
  vendor_string: PROD
  floating license

    alice narmada:18 (v6.180) (narmada/5280 6701), start Thu 6/26 16:12
    bob corp lab yamuna_12 (v6.180) (narmada/5280 6702), start Thu 6/26 09:05
    alice ganga (v6.180) (narmada/5280 6703), start Fri 6/27 08:00

Users of Genus_Synthesis:  (Total of 5 licenses issued;  Total of 0 licenses in use)

Users of Voltus:  (Total of 2 licenses issued;  Total of 0 licenses in use)

"""


@pytest.fixture
def sample_report():
    return SAMPLE_REPORT


@pytest.fixture
def incoming_dir(tmp_path):
    """An incoming directory holding two synopsys reports and one cadence report."""
    d = tmp_path / "incoming"
    d.mkdir()
    (d / "synopsys_1.txt").write_text(SAMPLE_REPORT, encoding="utf-8")
    (d / "synopsys_2.txt").write_text(
        "Users of DC_Ultra:  (Total of 4 licenses issued;  Total of 1 licenses in use)\n"
        "    carol vm7 (v2.0) (lic01/27000 901), start Mon 6/30 10:00\n",
        encoding="utf-8",
    )
    (d / "Cadence.txt").write_text(
        "Users of Virtuoso:  (Total of 3 licenses issued;  Total of 2 licenses in use)\n"
        "    dave cad1 (v1.0) (lic02/5280 55), start Tue 7/1 11:11\n"
        "    dave cad2 (v1.0) (lic02/5280 56), start Tue 7/1 11:12\n",
        encoding="utf-8",
    )
    return d
