# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

import os
import sys

from bs4 import BeautifulSoup

from page_output import PageOutput
from spoiler_config import SpoilerConfig
from spoiler_modes import Mode, valid_mode_values
from spoiler_rewriter import rewrite_page_report


def inject_bundles(html, output):
    """Adds the collected bundle markup to <head>, once per bundle."""
    if not output.bundles:
        return html
    soup = BeautifulSoup(html, 'html.parser')
    head = soup.find('head')
    if head is None:
        return html
    existing = {tag.get('data-bundle') for tag in head.find_all(['style', 'script'])}
    fragment = BeautifulSoup(output.head_html(), 'html.parser')
    added = False
    for tag in fragment.find_all(['style', 'script']):
        if tag.get('data-bundle') in existing:
            continue
        head.append(tag.extract())
        added = True
    return str(soup) if added else html


def rewrite_html_file(filepath, mode, config):
    """Returns (rewritten_html, fix_list) for one file."""
    print(f"Processing {os.path.basename(filepath)}...")
    with open(filepath, 'r', encoding='utf-8') as f:
        html_content = f.read()

    output = PageOutput(config.language)
    html_content, fixes = rewrite_page_report(html_content, mode, config, output)
    if fixes:
        html_content = inject_bundles(html_content, output)
    return html_content, fixes


def batch_rewrite(root_dir, mode, config):
    """Rewrites every .html file under root_dir in place. Returns {relative_path: fixes}."""
    report = {}
    for root, dirs, files in os.walk(root_dir):
        for file in sorted(files):
            if not file.lower().endswith(('.html', '.htm')):
                continue
            path = os.path.join(root, file)
            rewritten, fixes = rewrite_html_file(path, mode, config)
            if fixes:
                with open(path, 'w', encoding='utf-8') as f:
                    f.write(rewritten)
            report[os.path.relpath(path, root_dir)] = fixes
    return report


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config = SpoilerConfig.load()

    print("--- MEDIA SPOILER ---")
    if argv:
        target_path = argv[0]
    else:
        target_path = input("Enter path to rewrite: ").strip('"')

    choices = valid_mode_values(config.enable_mark)
    if len(argv) > 1:
        raw_mode = argv[1]
    else:
        raw_mode = input(f"Mode ({', '.join(choices)}): ").strip()
    if raw_mode not in choices:
        print(f"Invalid mode '{raw_mode}'. Choose one of: {', '.join(choices)}")
        return 2
    mode = Mode(raw_mode)

    if os.path.isdir(target_path):
        report = batch_rewrite(target_path, mode, config)
        changed = {path: fixes for path, fixes in report.items() if fixes}
        print(f"Done. Rewrote {len(changed)} of {len(report)} files.")
        for file, fixes in changed.items():
            print(f"  [{file}]")
            for fix in fixes:
                print(f"    - {fix}")
    elif os.path.isfile(target_path):
        rewritten, fixes = rewrite_html_file(target_path, mode, config)
        if fixes:
            with open(target_path, 'w', encoding='utf-8') as f:
                f.write(rewritten)
        print(f"Done. Changes in {os.path.basename(target_path)}:")
        for fix in fixes:
            print(f"  - {fix}")
    else:
        print("Invalid path.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
