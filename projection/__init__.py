'''
Stock price projection with a policy-based assumption seeding layer.

This package turns a trailing fundamentals snapshot into bear/base/bull
price targets using multiple-based valuation (P/E or one of the EV
multiples). Default assumptions come from independent seeding policies that
can be swapped or compared through a SeedConfig.

Usage:
  from projection.data_loader import YahooFinanceLoader
  from projection.run import run_projection

  loader = YahooFinanceLoader()
  metrics = loader.load_metrics('AAPL')
  quote = loader.load_quote('AAPL')
  result = run_projection(metrics, quote.price, market_cap=quote.market_cap)
'''
