"""PriceWatch: price monitoring engine and API."""
