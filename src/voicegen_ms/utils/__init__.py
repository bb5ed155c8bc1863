"""
Utility Modules for voicegen-ms.

    - timeit.py: Wall-clock measurement of code blocks
"""
