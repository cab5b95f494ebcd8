"""
Test package for dualwan-agent

This package contains unit tests for the policy routing engine, the
configuration layer and the HTTP API. Nothing here touches the real kernel:
`ip` invocations go to the FakeKernel in fakes.py, which keeps rule and route
tables in memory and records every command it receives.
"""
