"""Path derivation core: templates, field lookup, slugs and page registry."""
