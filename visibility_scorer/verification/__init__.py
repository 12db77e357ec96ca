"""
Image format verification: network probing that runs before scoring.

Modules
-------
image_format : ImageFormatVerifier (httpx; HEAD -> byte-range sniff -> URL
               extension) + pure helpers format_from_content_type(),
               sniff_magic_bytes(), format_from_url().
"""
