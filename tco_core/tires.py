from __future__ import annotations
from .defaults import MarketTables
from .models import CountryConfig

def winter_equipment_cost(country: CountryConfig, tables: MarketTables) -> float:
    """
    Pneus hiver (coût unique, année 1) :
      - montant fixe si le pays impose les pneus hiver, sinon 0
      - indépendant du mode de détention (achat, crédit, leasing)
    """
    return tables.winter_tire_cost if country.winter_tire_requirement else 0.0
