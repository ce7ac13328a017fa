import argparse
import json
import os
from urllib.parse import unquote

import requests

proxy_base_url = os.getenv('PROXY_BASE_URL', 'http://localhost:8000')


def print_response(response):
    print(f"Status: {response.status_code} {response.reason}")
    for name, value in response.raw.headers.items():
        print(f"{name}: {value}")

    extras = response.headers.get('x-sfetch-extras')
    if extras:
        print("Debug metadata:")
        print(json.dumps(json.loads(unquote(extras)), indent=4))
    print()
    print(response.text[:500])


def check_header_mode(target, cookie=None):
    headers = {'x-sfetch-url': target}
    if cookie:
        headers['Cookie'] = cookie
    response = requests.get(proxy_base_url, headers=headers, allow_redirects=False)
    print_response(response)


def check_descriptor_mode(target, method):
    descriptor = {
        'method': method,
        'url': target,
        'headers': {'accept': '*/*'},
    }
    response = requests.post(proxy_base_url, json=descriptor, allow_redirects=False)
    print_response(response)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Send one request through a running sfetch proxy.')
    parser.add_argument('target', type=str, help='Absolute http(s) URL of the origin.')
    parser.add_argument('--mode', choices=['header', 'descriptor'], default='header')
    parser.add_argument('--method', type=str, default='GET', help='Method for descriptor mode.')
    parser.add_argument('--cookie', type=str, help='Cookie header to send in header mode.')
    args = parser.parse_args()

    if args.mode == 'header':
        check_header_mode(args.target, args.cookie)
    else:
        check_descriptor_mode(args.target, args.method)
