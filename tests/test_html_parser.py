from binran_search.config import DEFAULT_CONTENT_SELECTORS
from binran_search.parser.html_parser import parse_html

URL = "https://sites.google.com/zen.ac.jp/zen-gakuseibinran/home"


def test_prefers_main_region():
    html = """
    <html><body>
      <nav>Menu <a href="other">Other</a></nav>
      <div role="main"><h1>履修</h1><p>登録について</p></div>
    </body></html>
    """
    page = parse_html(URL, html, DEFAULT_CONTENT_SELECTORS)
    assert page.from_main
    assert page.text == "履修\n登録について"
    assert page.hrefs == ["other"]


def test_first_matching_region_in_document_order():
    html = '<body><div class="main-content">first</div><div id="main-content">second</div></body>'
    page = parse_html(URL, html, DEFAULT_CONTENT_SELECTORS)
    assert page.text == "first"


def test_falls_back_to_body_without_scripts():
    html = """
    <html><head><title>T</title><style>p {color: red}</style></head>
    <body><script>var x = 1;</script><p> Hello </p><noscript>enable js</noscript></body></html>
    """
    page = parse_html(URL, html, DEFAULT_CONTENT_SELECTORS)
    assert not page.from_main
    assert page.text == "Hello"


def test_empty_document_gives_empty_text():
    page = parse_html(URL, "<html><body>   </body></html>", DEFAULT_CONTENT_SELECTORS)
    assert page.text == ""
    assert page.hrefs == []


def test_collects_every_href_in_order():
    html = '<a href=" /a ">A</a><a>no href</a><a href="">empty</a><a href="#x">X</a><a href="/a">again</a>'
    page = parse_html(URL, html, DEFAULT_CONTENT_SELECTORS)
    assert page.hrefs == ["/a", "#x", "/a"]
