"""Hand-written HTML fixtures for the browser tests.

Each constant is a complete document loaded with ``page.set_content``. The
``JOURNEY_APP`` document is a small single-page application: screens are
swapped in place after a short delay and the URL never changes.
"""
from __future__ import annotations

import json
from typing import Optional
from urllib.parse import quote


def document(body: str, script: str = "") -> str:
    return (
        '<!doctype html><html lang="en"><head><meta charset="utf-8"><title>Journey</title></head>'
        f"<body>{body}<script>{script}</script></body></html>"
    )


def data_url(html: str) -> str:
    return "data:text/html;charset=utf-8," + quote(html)


# ---- error idioms -------------------------------------------------------------

ERROR_SUMMARY_BODY = """
<div class="govuk-error-summary" role="alert">
  <h2 class="govuk-error-summary__title">There is a problem</h2>
  <div class="govuk-error-summary__body">
    <ul class="govuk-list govuk-error-summary__list">
      <li><a href="#full-name">Enter your full name</a></li>
      <li><a href="#email">Enter an email address in the correct format, like name@example.com</a></li>
    </ul>
  </div>
</div>
"""

SUMMARY_ERRORS_PAGE = document(ERROR_SUMMARY_BODY + "<h1>Your contact details</h1>")

BOTH_ERRORS_PAGE = document(
    ERROR_SUMMARY_BODY
    + """
<h1>Your contact details</h1>
<div class="govuk-form-group govuk-form-group--error">
  <label class="govuk-label" for="full-name">Full name</label>
  <p id="full-name-error" class="govuk-error-message">
    <span class="govuk-visually-hidden">Error:</span> Enter your full name
  </p>
  <input class="govuk-input govuk-input--error" id="full-name" name="fullName" type="text">
</div>
"""
)

INLINE_ERRORS_PAGE = document("""
<h1>What is your postcode?</h1>
<label for="postcode">Postcode</label>
<p>Error: Enter a real postcode</p>
<input id="postcode" name="postcode" type="text">
""")

NO_ERRORS_PAGE = document("""
<h1>What is your postcode?</h1>
<label for="postcode">Postcode</label>
<input id="postcode" name="postcode" type="text">
""")

HIDDEN_ERROR_SUMMARY_PAGE = document(
    '<div style="display:none">' + ERROR_SUMMARY_BODY + "</div><h1>Your contact details</h1>"
)


# ---- summary idioms -------------------------------------------------------------

DESIGN_SYSTEM_SUMMARY_PAGE = document("""
<h1>Check your answers before submitting</h1>
<dl class="govuk-summary-list">
  <div class="govuk-summary-list__row">
    <dt class="govuk-summary-list__key">Full name</dt>
    <dd class="govuk-summary-list__value">Ada Lovelace</dd>
    <dd class="govuk-summary-list__actions">
      <a class="govuk-link" href="#full-name">Change<span class="govuk-visually-hidden"> full name</span></a>
    </dd>
  </div>
  <div class="govuk-summary-list__row">
    <dt class="govuk-summary-list__key">Email address</dt>
    <dd class="govuk-summary-list__value">ada@example.com</dd>
    <dd class="govuk-summary-list__actions">
      <a class="govuk-link" href="#email">Change<span class="govuk-visually-hidden"> email address</span></a>
    </dd>
  </div>
  <div class="govuk-summary-list__row">
    <dt class="govuk-summary-list__key">Aircraft type</dt>
    <dd class="govuk-summary-list__value">
      Glider
    </dd>
    <dd class="govuk-summary-list__actions">
      <a class="govuk-link" href="#type">Change<span class="govuk-visually-hidden"> aircraft type</span></a>
    </dd>
  </div>
</dl>
<button type="button">Accept and send</button>
""")

DEFINITION_LIST_SUMMARY_PAGE = document("""
<h1>Check your answers</h1>
<dl>
  <dt>Full name</dt>
  <dd>Ada Lovelace</dd>
  <dt>Email address</dt>
  <dd>ada@example.com</dd>
</dl>
""")

TABLE_SUMMARY_PAGE = document("""
<h1>Check your answers</h1>
<table>
  <tr><th>Question</th><th>Answer</th></tr>
  <tr><th>Full name</th><td>Ada Lovelace</td></tr>
  <tr><th>Email address</th><td>ada@example.com</td></tr>
</table>
""")


# ---- navigation and typography ---------------------------------------------------

BACK_LINK_PAGE = document("""
<a href="#" class="govuk-back-link">Back</a>
<h1>Your contact details</h1>
""")

BACK_BUTTON_PAGE = document("""
<button type="button" class="govuk-button govuk-button--secondary">Back</button>
<h1>Your contact details</h1>
""")

BACK_BOTH_PAGE = document("""
<a href="#" class="govuk-back-link">Back</a>
<h1>Your contact details</h1>
<button type="button" class="govuk-button govuk-button--secondary">Back</button>
""")

SMART_QUOTES_PAGE = document("""
<h1>What’s the aircraft’s registration mark?</h1>
<p>Enter it as shown on the aircraft’s “certificate”.</p>
""")

STRAIGHT_QUOTES_PAGE = document("""
<h1>What's the aircraft's registration mark?</h1>
<p>Enter it as shown on the aircraft's "certificate".</p>
""")


# ---- forms ----------------------------------------------------------------------

FORM_PAGE = document("""
<h1>Your details</h1>
<form onsubmit="return false">
  <label for="full-name">Full name</label>
  <input id="full-name" name="fullName" type="text">

  <label for="email">Email address</label>
  <input id="email" name="email" type="email">

  <label for="notes">Notes</label>
  <textarea id="notes" name="notes"></textarea>

  <fieldset class="govuk-fieldset">
    <legend class="govuk-fieldset__legend">Where do you live?</legend>
    <input type="radio" id="where-england" name="where" value="england">
    <label for="where-england">England</label>
    <input type="radio" id="where-wales" name="where" value="wales">
    <label for="where-wales">Wales</label>
  </fieldset>

  <fieldset class="govuk-fieldset">
    <legend class="govuk-fieldset__legend">Which aircraft types do you fly?</legend>
    <input type="checkbox" id="types-glider" name="types" value="glider">
    <label for="types-glider">Glider</label>
    <input type="checkbox" id="types-balloon" name="types" value="balloon">
    <label for="types-balloon">Balloon</label>
    <input type="checkbox" id="types-helicopter" name="types" value="helicopter">
    <label for="types-helicopter">Helicopter</label>
  </fieldset>

  <fieldset class="govuk-fieldset" role="group">
    <legend class="govuk-fieldset__legend">Date of birth</legend>
    <label for="dob-day">Day</label>
    <input id="dob-day" name="dob-day" type="text" inputmode="numeric">
    <label for="dob-month">Month</label>
    <input id="dob-month" name="dob-month" type="text" inputmode="numeric">
    <label for="dob-year">Year</label>
    <input id="dob-year" name="dob-year" type="text" inputmode="numeric">
  </fieldset>

  <label for="country">Country</label>
  <select id="country" name="country">
    <option value="">Choose a country</option>
    <option value="fr">France</option>
    <option value="uk">United Kingdom</option>
  </select>

  <input type="checkbox" id="terms" name="terms">
  <label for="terms">I accept the terms and conditions</label>

  <button type="button">Continue</button>
</form>
""")

COMBINED_DATE_PAGE = document("""
<h1>When does the lease start?</h1>
<label for="start-date">Start date</label>
<input id="start-date" name="startDate" type="text">
""")

NO_DATE_CONTROL_PAGE = document("<h1>When does the lease start?</h1>")

# Free text whose label mentions a date.
FREE_TEXT_DATE_PAGE = document("""
<h1>How should we contact you?</h1>
<label for="contact-when">Preferred date of contact</label>
<input id="contact-when" name="contactWhen" type="text">
""")

# Typographic quotes in legends and labels; straight quotes in the last label.
CURLY_QUOTES_FORM_PAGE = document("""
<h1>About the aircraft’s owner</h1>
<fieldset class="govuk-fieldset">
  <legend class="govuk-fieldset__legend">What’s your nationality?</legend>
  <input type="radio" id="nationality-british" name="nationality" value="british">
  <label for="nationality-british">British</label>
  <input type="radio" id="nationality-irish" name="nationality" value="irish">
  <label for="nationality-irish">Irish</label>
</fieldset>
<label for="owner-name">Owner’s full name</label>
<input id="owner-name" name="ownerName" type="text">
<fieldset class="govuk-fieldset">
  <legend class="govuk-fieldset__legend">Which of the owner’s licences are current?</legend>
  <input type="checkbox" id="licence-ppl" name="licences" value="ppl">
  <label for="licence-ppl">Private pilot’s licence</label>
  <input type="checkbox" id="licence-cpl" name="licences" value="cpl">
  <label for="licence-cpl">Commercial pilot’s licence</label>
</fieldset>
<label for="hangar">Operator's hangar</label>
<input id="hangar" name="hangar" type="text">
""")

# Continue hides the screen, then renders the next one after a delay.
SPA_PAGE = document(
    """
<main id="app">
  <h1>Step one</h1>
  <label for="answer">Answer</label>
  <input id="answer" name="answer" type="text">
  <button type="button" id="go">Continue</button>
</main>
""",
    """
document.getElementById('go').addEventListener('click', () => {
  const app = document.getElementById('app');
  app.innerHTML = '';
  setTimeout(() => { app.innerHTML = '<h1>Step two</h1><p>Thanks</p>'; }, 400);
});
""",
)

AUTOFILL_PAGE = document(
    """
<h1>Your contact details</h1>
<label for="full-name">Full name</label>
<input id="full-name" name="fullName" type="text">
<button type="button" id="autofill">Autofill</button>
""",
    """
document.getElementById('autofill').addEventListener('click', () => {
  document.getElementById('full-name').value = 'Auto Filled';
});
""",
)


# ---- submission -----------------------------------------------------------------

CHECK_ANSWERS_HEADING = "Check your answers before submitting"

CONFIRMATION_OUTCOME = """
<div class="govuk-panel govuk-panel--confirmation">
  <h1 class="govuk-panel__title">Application submitted</h1>
  <div class="govuk-panel__body">Your reference number<br><strong>APP-7F3K-9Q2Z</strong></div>
</div>
"""

BARE_CONFIRMATION_OUTCOME = "<h1>Application submitted</h1><p>We have sent you a confirmation email.</p>"

ALTERNATE_CONFIRMATION_OUTCOME = "<h1>Your application has been received</h1><p>We will be in touch.</p>"

NEXT_STEPS_OUTCOME = "<h1>What happens next</h1><p>We will email you within 5 working days.</p>"

VALIDATION_FAILURE_OUTCOME = f"""
<div class="govuk-error-summary" role="alert">
  <h2 class="govuk-error-summary__title">There is a problem</h2>
  <ul class="govuk-error-summary__list"><li><a href="#declaration">You must accept the declaration</a></li></ul>
</div>
<h1>{CHECK_ANSWERS_HEADING}</h1>
"""

SERVICE_ERROR_OUTCOME = "<h1>Sorry, there is a problem with the service</h1><p>Try again later.</p>"


def review_page(outcome: Optional[str], delay_ms: int = 300) -> str:
    """Review page whose Accept and send button renders ``outcome``.

    With ``outcome=None`` the button does nothing.
    """
    script = ""
    if outcome is not None:
        script = (
            "document.getElementById('send').addEventListener('click', () => {"
            f" setTimeout(() => {{ document.getElementById('app').innerHTML = {json.dumps(outcome.strip())}; }}, {delay_ms});"
            " });"
        )
    return document(
        f"""
<main id="app">
  <h1>{CHECK_ANSWERS_HEADING}</h1>
  <dl class="govuk-summary-list">
    <div class="govuk-summary-list__row">
      <dt class="govuk-summary-list__key">Full name</dt>
      <dd class="govuk-summary-list__value">Ada Lovelace</dd>
    </div>
  </dl>
  <button type="button" id="send">Accept and send</button>
</main>
""",
        script,
    )


# ---- design-system content components ---------------------------------------------

CONTENT_COMPONENTS_PAGE = document("""
<h1>Before you start</h1>
<div class="govuk-notification-banner govuk-notification-banner--success" role="alert">
  <div class="govuk-notification-banner__content">
    <p class="govuk-notification-banner__heading">Your draft has been saved</p>
  </div>
</div>
<div class="govuk-warning-text">
  <span class="govuk-warning-text__icon" aria-hidden="true">!</span>
  <strong class="govuk-warning-text__text">You can be fined up to £5,000 if you do not register.</strong>
</div>
<div class="govuk-inset-text">It can take up to 8 weeks to register an aircraft.</div>
<details class="govuk-details">
  <summary class="govuk-details__summary"><span class="govuk-details__summary-text">Help with registration marks</span></summary>
  <div class="govuk-details__text">Registration marks start with G- followed by four letters.</div>
</details>
<ul class="govuk-task-list">
  <li class="govuk-task-list__item">
    <div class="govuk-task-list__name-and-hint"><a href="#company" onclick="window.task = 'company'; return false;">Company details</a></div>
    <div class="govuk-task-list__status"><strong class="govuk-tag">Completed</strong></div>
  </li>
  <li class="govuk-task-list__item">
    <div class="govuk-task-list__name-and-hint"><a href="#aircraft">Aircraft details</a></div>
    <div class="govuk-task-list__status"><strong class="govuk-tag govuk-tag--blue">In progress</strong></div>
  </li>
</ul>
<table class="govuk-table">
  <thead><tr><th>Mark</th><th>Type</th></tr></thead>
  <tbody>
    <tr><td>G-ABCD</td><td>Glider</td></tr>
    <tr><td>G-WXYZ</td><td>Balloon</td></tr>
  </tbody>
</table>
<a href="#" role="button" class="govuk-button govuk-button--start" onclick="window.started = true; return false;">Start now</a>
""")

# Question pages whose Continue button renders a fixed "Next question" screen.
QUESTION_SCRIPT = """
document.getElementById('next').addEventListener('click', () => {
  const answers = {};
  document.querySelectorAll('input').forEach((input) => {
    if ((input.type === 'radio' || input.type === 'checkbox') && !input.checked) return;
    answers[input.name] = (answers[input.name] ? answers[input.name] + ',' : '') + input.value;
  });
  window.answers = answers;
  document.getElementById('app').innerHTML = '<h1>Next question</h1>';
});
"""

YES_NO_PAGE = document(
    """
<main id="app">
  <fieldset class="govuk-fieldset">
    <legend class="govuk-fieldset__legend"><h1>Is the aircraft kept in the UK?</h1></legend>
    <input type="radio" id="kept-yes" name="kept" value="yes"><label for="kept-yes">Yes</label>
    <input type="radio" id="kept-no" name="kept" value="no"><label for="kept-no">No</label>
  </fieldset>
  <button type="button" id="next">Continue</button>
</main>
""",
    QUESTION_SCRIPT,
)

CHECKBOX_QUESTION_PAGE = document(
    """
<main id="app">
  <fieldset class="govuk-fieldset">
    <legend class="govuk-fieldset__legend"><h1>Which aircraft types do you fly?</h1></legend>
    <input type="checkbox" id="types-glider" name="types" value="glider"><label for="types-glider">Glider</label>
    <input type="checkbox" id="types-balloon" name="types" value="balloon"><label for="types-balloon">Balloon</label>
  </fieldset>
  <button type="button" id="next">Continue</button>
</main>
""",
    QUESTION_SCRIPT,
)

DATE_QUESTION_PAGE = document(
    """
<main id="app">
  <fieldset class="govuk-fieldset" role="group">
    <legend class="govuk-fieldset__legend"><h1>What is the registration date?</h1></legend>
    <label for="reg-date-day">Day</label><input id="reg-date-day" name="day" type="text">
    <label for="reg-date-month">Month</label><input id="reg-date-month" name="month" type="text">
    <label for="reg-date-year">Year</label><input id="reg-date-year" name="year" type="text">
  </fieldset>
  <button type="button" id="next">Continue</button>
</main>
""",
    QUESTION_SCRIPT,
)

FILE_UPLOAD_PAGE = document(
    """
<main id="app">
  <h1>Upload the certificate of airworthiness</h1>
  <label for="certificate">Upload a file</label>
  <input id="certificate" name="certificate" type="file">
  <button type="button" id="next">Continue</button>
</main>
""",
    QUESTION_SCRIPT,
)

CONFIRMATION_PAGE = document(CONFIRMATION_OUTCOME)

NAVIGATION_COMPONENTS_PAGE = document(
    """
<div class="govuk-cookie-banner" role="region" aria-label="Cookies on Register an aircraft">
  <h2>Cookies on Register an aircraft</h2>
  <button type="button" class="govuk-button" data-choice="accepted">Accept analytics cookies</button>
  <button type="button" class="govuk-button" data-choice="rejected">Reject analytics cookies</button>
</div>
<div class="govuk-phase-banner">
  <p class="govuk-phase-banner__content">
    <strong class="govuk-tag govuk-phase-banner__content__tag">Beta</strong>
    <span class="govuk-phase-banner__text">This is a new service. Your <a href="#feedback">feedback</a> will help us to improve it.</span>
  </p>
</div>
<nav class="govuk-breadcrumbs">
  <ol class="govuk-breadcrumbs__list">
    <li class="govuk-breadcrumbs__list-item"><a href="#home" data-crumb="home">Home</a></li>
    <li class="govuk-breadcrumbs__list-item"><a href="#aircraft" data-crumb="aircraft">Aircraft</a></li>
  </ol>
</nav>
<h1>Registered aircraft</h1>
<div class="govuk-tabs">
  <ul class="govuk-tabs__list" role="tablist">
    <li class="govuk-tabs__list-item"><a class="govuk-tabs__tab" role="tab" href="#gliders">Gliders</a></li>
    <li class="govuk-tabs__list-item"><a class="govuk-tabs__tab" role="tab" href="#balloons">Balloons</a></li>
  </ul>
  <div class="govuk-tabs__panel" id="gliders" role="tabpanel">12 gliders registered this year</div>
  <div class="govuk-tabs__panel govuk-tabs__panel--hidden" id="balloons" role="tabpanel" hidden>3 balloons registered this year</div>
</div>
<nav class="govuk-pagination" aria-label="Pagination">
  <div class="govuk-pagination__prev"><a href="#p1" data-page="previous">Previous<span class="govuk-visually-hidden"> page</span></a></div>
  <ul class="govuk-pagination__list">
    <li class="govuk-pagination__item"><a href="#p1" aria-label="Page 1" data-page="1">1</a></li>
    <li class="govuk-pagination__item govuk-pagination__item--current"><a href="#p2" aria-label="Page 2" aria-current="page" data-page="2">2</a></li>
    <li class="govuk-pagination__item"><a href="#p12" aria-label="Page 12" data-page="12">12</a></li>
  </ul>
  <div class="govuk-pagination__next"><a href="#p3" data-page="next">Next<span class="govuk-visually-hidden"> page</span></a></div>
</nav>
<p><a href="#elsewhere">Next steps for owners</a></p>
""",
    """
window.clicks = [];
document.querySelectorAll('.govuk-cookie-banner button').forEach((button) => {
  button.addEventListener('click', () => {
    window.cookies = button.dataset.choice;
    document.querySelector('.govuk-cookie-banner').hidden = true;
  });
});
document.querySelectorAll('[data-crumb], [data-page]').forEach((link) => {
  link.addEventListener('click', (event) => {
    event.preventDefault();
    window.clicks.push(link.dataset.crumb || link.dataset.page);
  });
});
document.querySelectorAll('[role="tab"]').forEach((tab) => {
  tab.addEventListener('click', (event) => {
    event.preventDefault();
    document.querySelectorAll('.govuk-tabs__panel').forEach((panel) => {
      const selected = '#' + panel.id === tab.getAttribute('href');
      panel.hidden = !selected;
      panel.classList.toggle('govuk-tabs__panel--hidden', !selected);
    });
  });
});
""",
)

# Continue always re-renders the same page with an error summary.
ALWAYS_INVALID_PAGE = document(
    """
<main id="app">
  <h1>What is your postcode?</h1>
  <label for="postcode">Postcode</label>
  <input id="postcode" name="postcode" type="text">
  <button type="button" id="next">Continue</button>
</main>
""",
    """
document.getElementById('app').addEventListener('click', (event) => {
  if (event.target.id !== 'next') return;
  if (!document.querySelector('.govuk-error-summary')) {
    document.getElementById('app').insertAdjacentHTML('afterbegin',
      '<div class="govuk-error-summary"><h2>There is a problem</h2>' +
      '<ul><li><a href="#postcode">Enter a real postcode</a></li></ul></div>');
  }
});
""",
)


# ---- single-page journey ------------------------------------------------------------

JOURNEY_SCRIPT = r"""
const app = document.getElementById('app');
const answers = {};
let current = null;

const esc = (value) => String(value || '').replace(/[&<>"']/g,
  (c) => ({'&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;'}[c]));

const row = (key, value) => `
  <div class="govuk-summary-list__row">
    <dt class="govuk-summary-list__key">${key}</dt>
    <dd class="govuk-summary-list__value">${esc(value)}</dd>
    <dd class="govuk-summary-list__actions"><a class="govuk-link" href="#" data-change="contact">Change<span class="govuk-visually-hidden"> ${key.toLowerCase()}</span></a></dd>
  </div>`;

const screens = {
  applicant: () => `
    <h1>Who is registering the aircraft?</h1>
    <fieldset class="govuk-fieldset">
      <legend class="govuk-fieldset__legend">Applicant type</legend>
      <input type="radio" id="applicant-individual" name="applicant" value="An individual">
      <label for="applicant-individual">An individual</label>
      <input type="radio" id="applicant-organisation" name="applicant" value="A company or organisation">
      <label for="applicant-organisation">A company or organisation</label>
    </fieldset>
    <button type="button" data-next="contact">Continue</button>`,
  contact: () => `
    <a href="#" class="govuk-back-link" data-back="applicant">Back</a>
    <h1>Your contact details</h1>
    <label for="full-name">Full name</label>
    <input id="full-name" name="fullName" type="text" value="${esc(answers.fullName)}">
    <label for="email">Email address</label>
    <input id="email" name="email" type="email" value="${esc(answers.email)}">
    <label for="phone">Telephone number</label>
    <input id="phone" name="phone" type="tel" value="${esc(answers.phone)}">
    <button type="button" data-next="check">Continue</button>`,
  check: () => `
    <h1>Check your answers before submitting</h1>
    <dl class="govuk-summary-list">
      ${row('Applicant type', answers.applicant)}
      ${row('Full name', answers.fullName)}
      ${row('Email address', answers.email)}
      ${row('Telephone number', answers.phone)}
    </dl>
    <button type="button" data-send="true">Accept and send</button>`,
  confirmation: () => `
    <div class="govuk-panel govuk-panel--confirmation">
      <h1 class="govuk-panel__title">Application submitted</h1>
      <div class="govuk-panel__body">Your reference number<br><strong>APP-4H7K-2M9P</strong></div>
    </div>`,
};

const errorsFor = (name) => {
  const errors = [];
  if (name === 'applicant' && !answers.applicant) errors.push(['applicant-individual', 'Select who is registering the aircraft']);
  if (name === 'contact' && !answers.fullName) errors.push(['full-name', 'Enter your full name']);
  return errors;
};

const errorSummary = (errors) => `
  <div class="govuk-error-summary" role="alert">
    <h2 class="govuk-error-summary__title">There is a problem</h2>
    <ul class="govuk-list govuk-error-summary__list">
      ${errors.map(([id, text]) => `<li><a href="#${id}">${text}</a></li>`).join('')}
    </ul>
  </div>`;

const collect = () => {
  app.querySelectorAll('input').forEach((input) => {
    if (input.type === 'radio') {
      if (input.checked) answers[input.name] = input.value;
    } else {
      answers[input.name] = input.value;
    }
  });
};

const render = (name, errors) => {
  current = name;
  app.innerHTML = '';
  setTimeout(() => {
    app.innerHTML = (errors && errors.length ? errorSummary(errors) : '') + screens[name]();
  }, 100);
};

app.addEventListener('click', (event) => {
  const target = event.target.closest('[data-next], [data-back], [data-change], [data-send]');
  if (!target) return;
  event.preventDefault();
  if (target.dataset.next) {
    collect();
    const errors = errorsFor(current);
    render(errors.length ? current : target.dataset.next, errors);
  } else if (target.dataset.back) {
    render(target.dataset.back);
  } else if (target.dataset.change) {
    render(target.dataset.change);
  } else if (target.dataset.send) {
    app.querySelector('[data-send]').disabled = true;
    setTimeout(() => render('confirmation'), 300);
  }
});

render('applicant');
"""

JOURNEY_APP = document('<main id="app"></main>', JOURNEY_SCRIPT)
