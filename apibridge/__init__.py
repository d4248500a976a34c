"""
apibridge: expose OpenAPI operations as agent tools.

Every operation of an API description becomes a tool with a validation
schema and a dispatcher that performs the HTTP call, returning agent
friendly results and recovery guidance.
"""

__version__ = "0.1.0"
