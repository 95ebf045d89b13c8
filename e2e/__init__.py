"""
UI web end-to-end suite.

- config: environment-driven settings
- log: structured logging and the TestLogger
- executor: Playwright wrapper with the BrowserError taxonomy
- pages: page objects for the demo site
- test_data: fixture files, upload policy and user records
- cli: test-data maintenance commands
"""
