"""HTML fixtures shaped like bestseller listing and product pages."""

BASE_URL = "https://www.amazon.com/gp/bestsellers"

LANDING_HTML = """
<div role="tree">
  <div role="treeitem"><a href="/zgbs">Any Department</a></div>
  <div role="group">
    <div role="treeitem"><a href="/Best-Sellers-Amazon-Devices/zgbs/amazon-devices/ref=zg_bs_nav_0">Amazon Devices &amp; Accessories</a></div>
    <div role="treeitem"><a href="/Best-Sellers-Electronics/zgbs/electronics/ref=zg_bs_nav_0">Electronics</a></div>
    <div role="treeitem"><a href="/Best-Sellers-Electronics/zgbs/electronics/ref=zg_bs_nav_0">Electronics</a></div>
    <div role="treeitem"><a href="/gp/help/customer">Help</a></div>
  </div>
</div>
"""

DEPARTMENT_HTML = """
<div role="tree">
  <div role="treeitem"><a href="/zgbs">Any Department</a></div>
  <div role="group">
    <div role="treeitem"><span class="zg-selected">Electronics</span></div>
    <div role="group">
      <div role="treeitem"><a href="/Best-Sellers-Camera-Photo/zgbs/electronics/502394">Camera &amp; Photo</a></div>
      <div role="treeitem"><a href="/Best-Sellers-Headphones/zgbs/electronics/172541">Headphones</a></div>
      <div role="group">
        <div role="treeitem"><a href="/zgbs/electronics/281052">Digital Cameras</a></div>
        <div role="group">
          <div role="treeitem"><a href="/zgbs/electronics/3017941">Point &amp; Shoot</a></div>
        </div>
      </div>
    </div>
  </div>
</div>
"""

# Department page listing only its direct children, own node as a link
LINKED_DEPARTMENT_HTML = """
<div role="tree">
  <div role="treeitem"><a href="/zgbs">Any Department</a></div>
  <div role="group">
    <div role="treeitem"><a href="/Best-Sellers-Electronics/zgbs/electronics">Electronics</a></div>
    <div role="group">
      <div role="treeitem"><a href="/Best-Sellers-Camera-Photo/zgbs/electronics/502394/ref=zg_bs_nav_1">Camera &amp; Photo</a></div>
      <div role="treeitem"><a href="/Best-Sellers-Headphones/zgbs/electronics/172541">Headphones</a></div>
    </div>
  </div>
</div>
"""

# Level-2 page: sibling repeated with a tracking suffix, one new child
CAMERA_PAGE_HTML = """
<div role="tree">
  <div role="treeitem"><a href="/zgbs">Any Department</a></div>
  <div role="group">
    <div role="treeitem"><a href="/Best-Sellers-Electronics/zgbs/electronics">Electronics</a></div>
    <div role="group">
      <div role="treeitem"><span class="zg-selected">Camera &amp; Photo</span></div>
      <div role="treeitem"><a href="/Best-Sellers-Headphones/zgbs/electronics/172541/ref=zg_bs_nav_2">Headphones</a></div>
      <div role="group">
        <div role="treeitem"><a href="/Best-Sellers-Digital-Cameras/zgbs/electronics/281052/ref=zg_bs_nav_3">Digital Cameras</a></div>
      </div>
    </div>
  </div>
</div>
"""

FLAT_DEPARTMENT_HTML = """
<div id="content">
  <a href="/Best-Sellers-Electronics/zgbs/electronics">Electronics</a>
  <a href="/Best-Sellers-Camera-Photo/zgbs/electronics/502394/ref=zg_bs_nav_1">Camera &amp; Photo</a>
  <a href="/gp/help">Help</a>
</div>
"""

GRID_HTML = """
<div class="p13n-gridRow">
  <div id="p13n-asin-index-0" class="zg-grid-general-faceout">
    <div data-asin="B08N5WRWNW">
      <a class="a-link-normal" href="/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1">
        <img class="a-dynamic-image" src="https://images-na.ssl-images-amazon.com/images/I/echo.jpg" alt="Echo Dot">
      </a>
      <a class="a-link-normal" href="/Echo-Dot/dp/B08N5WRWNW/ref=zg_bs_1">
        <div class="_cDEzb_p13n-sc-css-line-clamp-3_g3dy1">Echo Dot (4th Gen)</div>
      </a>
      <div class="a-icon-row">
        <a href="/product-reviews/B08N5WRWNW">
          <i class="a-icon a-icon-star-small"><span class="a-icon-alt">4.7 out of 5 stars</span></i>
          <span class="a-size-small">912,345</span>
        </a>
      </div>
      <span class="_cDEzb_p13n-sc-price_3mJ9Z">$49.99</span>
    </div>
  </div>
  <div id="p13n-asin-index-1" class="zg-grid-general-faceout">
    <div data-asin="B07XJ8C8F5">
      <a class="a-link-normal" href="/Kindle/dp/B07XJ8C8F5"><div class="p13n-sc-truncate">Kindle</div></a>
    </div>
  </div>
</div>
"""

LEGACY_HTML = """
<ol id="zg-ordered-list">
  <li class="zg-item-immersion">
    <a class="a-link-normal" href="https://www.amazon.com/Kindle-Paperwhite/dp/B07XJ8C8F5">
      <div class="p13n-sc-truncate">Kindle Paperwhite</div>
    </a>
    <span class="p13n-sc-price">$129.99</span>
  </li>
  <li class="zg-item-immersion">
    <a class="a-link-normal" href="https://www.amazon.com/Fire-TV/dp/B08C1W5N87">
      <div class="p13n-sc-truncate">Fire TV Stick</div>
    </a>
  </li>
</ol>
"""

FALLBACK_HTML = """
<div>
  <a href="/gp/help">Help</a>
  <a href="https://example.com/dp/B000000000">Elsewhere</a>
  <a href="/Some-Thing/dp/B000TEST01/ref=x">Some Thing</a>
</div>
"""

DETAIL_HTML = """
<div id="centerCol">
  <span id="productTitle">  Echo Dot (4th Gen) | Smart speaker with Alexa  </span>
  <div id="corePrice_feature_div"><span class="a-offscreen">$39.99</span></div>
  <span id="acrPopover" title="4.8 out of 5 stars"><span>4.8</span></span>
  <span id="acrCustomerReviewText">1.2K ratings</span>
  <img id="landingImage" src="https://m.media-amazon.com/images/I/large.jpg">
</div>
"""
