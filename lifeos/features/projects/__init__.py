"""
Projects feature package: named, ordered buckets that thoughts are filed into.
"""
