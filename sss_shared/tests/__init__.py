"""
Test suite for the SSS shared library.

Test categories:
- Error classification
- Payer identity resolution
- Instruction encoding
- Ledger client and token service (mocked RPC)
- DAS asset query (mocked HTTP)
- FFI boundary
"""
