from html import escape
from string import Template

from discount_lock.billing.plans import BILLING_PLANS, BillingPlan

APP_NAME = "Code Blocker Pro"
SUPPORT_EMAIL = "support@codeblock.app"
LAST_UPDATED = "November 25, 2025"

_LEGAL_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 800px; margin: 40px auto; padding: 20px; line-height: 1.6; color: #333; }
    h1 { margin-bottom: 10px; color: #202223; }
    h2 { margin-top: 30px; margin-bottom: 10px; color: #202223; }
    p, ul { margin-bottom: 15px; }
    li { margin-bottom: 8px; }
    .updated { color: #666; font-size: 14px; margin-bottom: 30px; }
    a { color: #008060; }
"""

_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$title</title>
  <style>$style</style>
</head>
<body>
$body
</body>
</html>
""")

PRIVACY_BODY = Template("""
  <h1>Privacy Policy</h1>
  <p class="updated">Last updated: $updated</p>
  <p>$app_name is a Shopify application that helps merchants manage discount codes during sales (the "App").
  This policy describes what information the App collects when you install and use it.</p>

  <h2>Information We Collect</h2>
  <ul>
    <li><strong>Store information:</strong> your shop domain, provided by Shopify during installation.</li>
    <li><strong>Billing information:</strong> subscription status from Shopify's Billing API. We never see payment card details.</li>
    <li><strong>Usage information:</strong> whether Sale Mode is enabled, as configured in the checkout editor.</li>
  </ul>

  <h2>Information We Do Not Collect</h2>
  <p>The App runs inside Shopify's checkout extension framework. It does not collect, store or transmit
  customer names, emails, addresses, payment details, order history, discount code values or gift card information.</p>

  <h2>How We Use Information</h2>
  <ul>
    <li>To authenticate your store and provide the App's functionality.</li>
    <li>To process subscriptions through Shopify's Billing API.</li>
    <li>To answer support requests and meet legal obligations.</li>
  </ul>
  <p>We do not sell or share your information for marketing purposes.</p>

  <h2>Data Requests and Deletion</h2>
  <p>We honor Shopify's mandatory privacy webhooks (customer data requests, customer redaction and shop redaction).
  Because the App stores no customer data, these requests are acknowledged without further action.
  Uninstalling the App stops all processing.</p>

  <h2>Relationship with Shopify</h2>
  <p>Shopify processes information about your use of the App. See the
  <a href="https://www.shopify.com/legal/privacy/app-users">Shopify Consumer Privacy Policy</a>.</p>

  <h2>Contact</h2>
  <p>Questions about this policy: <a href="mailto:$support_email">$support_email</a></p>
""")

TERMS_BODY = Template("""
  <h1>Terms of Service</h1>
  <p class="updated">Last updated: $updated</p>

  <h2>1. Acceptance</h2>
  <p>By installing $app_name you agree to these terms.</p>

  <h2>2. Service Description</h2>
  <p>The App removes discount codes at checkout while Sale Mode is enabled and shows shoppers a banner.
  Gift cards are not affected.</p>

  <h2>3. Billing</h2>
  <p>Paid plans are billed through Shopify's Billing API and appear on your Shopify invoice.
  Every plan starts with a 14-day free trial. You can cancel at any time from the App.</p>

  <h2>4. Merchant Responsibilities</h2>
  <p>You are responsible for configuring Sale Mode and for communicating your discount policy to customers.</p>

  <h2>5. Disclaimer</h2>
  <p>THE APP IS PROVIDED "AS IS" WITHOUT WARRANTIES OF ANY KIND. We do not guarantee uninterrupted or error-free operation.</p>

  <h2>6. Limitation of Liability</h2>
  <p>We shall not be liable for any indirect, incidental, special, or consequential damages arising from App use.</p>

  <h2>7. Modifications</h2>
  <p>We may modify these terms at any time. Continued use after changes constitutes acceptance.</p>

  <h2>8. Termination</h2>
  <p>We may terminate or suspend access to the App at our discretion, with or without notice.</p>

  <h2>9. Contact</h2>
  <p>For questions about these terms, contact us at $support_email</p>
""")

_HOME_STYLE = """
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #f6f6f7; color: #202223; }
    .container { max-width: 800px; margin: 0 auto; padding: 20px; }
    .card { background: #fff; border-radius: 8px; padding: 24px; margin-bottom: 16px; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
    h1 { font-size: 24px; margin-bottom: 8px; }
    h2 { font-size: 18px; margin-bottom: 12px; color: #6d7175; }
    .subtitle { color: #6d7175; margin-bottom: 20px; }
    .step { margin-bottom: 12px; }
    .step h3, .feature h3 { font-size: 14px; font-weight: 600; margin-bottom: 4px; }
    .step p, .feature p { font-size: 14px; color: #6d7175; }
    .feature { margin-bottom: 16px; }
    .btn { display: inline-block; background: #008060; color: #fff; padding: 10px 20px; border-radius: 4px; border: none; text-decoration: none; cursor: pointer; }
    .pricing { display: grid; grid-template-columns: repeat(2, 1fr); gap: 16px; margin-top: 16px; }
    .plan { border: 1px solid #e1e3e5; border-radius: 8px; padding: 20px; text-align: center; }
    .plan-name { font-weight: 600; margin-bottom: 8px; }
    .plan-price { font-size: 28px; font-weight: 700; color: #008060; }
    .plan-price span { font-size: 14px; font-weight: 400; color: #6d7175; }
    footer { text-align: center; font-size: 13px; color: #6d7175; margin-top: 24px; }
    footer a { color: #008060; }
"""

_PLAN_CARD = Template("""
        <div class="plan">
          <div class="plan-name">$label</div>
          <div class="plan-price">$$$amount<span>/month</span></div>
          <p class="subtitle">$trial_days-day free trial</p>
          <button class="btn" onclick="subscribe('$name')">Start Free Trial</button>
        </div>""")

HOME_BODY = Template("""
  <div class="container">
    <div class="card">
      <h1>Sale Discount Lock</h1>
      <p class="subtitle">Automatically block discount codes during sitewide sales. Gift cards still apply.</p>
      <div class="feature"><h3>Discount code blocking</h3><p>Applied discount codes are removed at checkout while Sale Mode is on.</p></div>
      <div class="feature"><h3>Gift card preservation</h3><p>Gift cards are never touched.</p></div>
      <div class="feature"><h3>Custom banner</h3><p>Tell shoppers why codes are disabled with your own message.</p></div>
    </div>

    <div class="card">
      <h2>Setup</h2>
      <div class="step"><h3>Open the checkout editor</h3><p>Settings &gt; Checkout &gt; Customize</p></div>
      <div class="step"><h3>Add the Sale Discount Lock block</h3><p>Place it anywhere in checkout.</p></div>
      <div class="step"><h3>Enable Sale Mode</h3><p>Toggle "Sale Mode" and optionally edit the banner message.</p></div>
      <div class="step"><h3>Save &amp; Publish</h3><p>Save your checkout customizations to go live.</p></div>
      <a href="/admin/settings/checkout" class="btn" target="_top">Open Checkout Settings</a>
    </div>

    <div class="card">
      <h2>Pricing Plans</h2>
      <p class="subtitle">Start with a free trial on any plan</p>
      <div class="pricing">$plans
      </div>
    </div>

    <footer><a href="/privacy">Privacy Policy</a> &middot; <a href="/terms">Terms of Service</a></footer>
  </div>
  <script>
    async function subscribe(plan) {
      try {
        const response = await fetch('/api/billing/subscribe', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ plan }),
        });
        const data = await response.json();
        if (data.confirmationUrl) {
          window.top.location.href = data.confirmationUrl;
        } else {
          alert(data.message || 'Unable to start subscription');
        }
      } catch (error) {
        alert('Unable to start subscription');
      }
    }
  </script>
""")


def _render(title: str, style: str, body: str) -> str:
    return _PAGE.substitute(title=title, style=style, body=body)


def render_plan_card(plan: BillingPlan) -> str:
    return _PLAN_CARD.substitute(
        label=escape(plan.name.removesuffix(" Plan")),
        amount=plan.amount,
        trial_days=plan.trial_days,
        name=escape(plan.name),
    )


def render_home_page() -> str:
    plans = "".join(render_plan_card(plan) for plan in BILLING_PLANS.values())
    return _render(f"Sale Discount Lock - {APP_NAME}", _HOME_STYLE, HOME_BODY.substitute(plans=plans))


def render_privacy_page() -> str:
    body = PRIVACY_BODY.substitute(
        updated=LAST_UPDATED, app_name=APP_NAME, support_email=SUPPORT_EMAIL
    )
    return _render(f"Privacy Policy - {APP_NAME}", _LEGAL_STYLE, body)


def render_terms_page() -> str:
    body = TERMS_BODY.substitute(
        updated=LAST_UPDATED, app_name=APP_NAME, support_email=SUPPORT_EMAIL
    )
    return _render(f"Terms of Service - {APP_NAME}", _LEGAL_STYLE, body)
