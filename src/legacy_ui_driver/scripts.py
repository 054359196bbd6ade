"""In-page scripts executed through :meth:`RemoteDocument.execute_script`.

Every script is a function body: arguments arrive as ``arguments[i]`` and the
result is produced with ``return``.
"""

from __future__ import annotations

READY_STATE = "return document.readyState;"

# jQuery's counter of in-flight AJAX requests; null when jQuery is absent.
ACTIVE_REQUESTS = (
    "return (typeof jQuery !== 'undefined' && typeof jQuery.active === 'number')"
    " ? jQuery.active : null;"
)

SCROLL_INTO_VIEW = "arguments[0].scrollIntoView({block: 'center'});"

CLICK = "arguments[0].click();"

SYNTHETIC_HOVER = """
var el = arguments[0];
['mouseover', 'mouseenter', 'mousemove'].forEach(function (type) {
  el.dispatchEvent(new MouseEvent(type, {bubbles: true, cancelable: true, view: window}));
});
"""

INVOKE_INLINE_HANDLER = """
var el = arguments[0];
var code = el.getAttribute(arguments[1]);
if (!code) {
  throw new Error('element has no ' + arguments[1] + ' handler');
}
return (new Function(code)).call(el);
"""

FORCE_VISIBLE = """
var el = arguments[0];
el.style.visibility = 'visible';
el.style.display = 'block';
"""

IS_RENDERED = """
var el = arguments[0];
var style = window.getComputedStyle(el);
return style.display !== 'none' && style.visibility !== 'hidden' && style.opacity !== '0';
"""

RESET_VALUE = "arguments[0].value = '';"

DISPATCH_EVENT = "arguments[0].dispatchEvent(new Event(arguments[1], {bubbles: true}));"

SET_SELECT_VALUE = """
var select = arguments[0];
var wanted = arguments[1];
var known = Array.prototype.some.call(select.options, function (option) {
  return option.value === wanted;
});
if (!known) {
  return null;
}
select.value = wanted;
if (typeof jQuery !== 'undefined') {
  jQuery(select).trigger('change');
} else {
  select.dispatchEvent(new Event('change', {bubbles: true}));
}
var option = select.options[select.selectedIndex];
return option ? option.text.trim() : '';
"""

SELECT_BY_OPTION_TEXT = """
var select = arguments[0];
var wanted = arguments[1];
var match = -1;
for (var i = 0; i < select.options.length; i++) {
  var text = select.options[i].text.trim();
  if (text === wanted) { match = i; break; }
  if (match < 0 && text.indexOf(wanted) !== -1) { match = i; }
}
if (match < 0) {
  return null;
}
select.selectedIndex = match;
if (typeof jQuery !== 'undefined') {
  jQuery(select).trigger('change');
} else {
  select.dispatchEvent(new Event('change', {bubbles: true}));
}
return select.value;
"""

SET_TEXT = "arguments[0].textContent = arguments[1];"

LIST_OPTION_TEXTS = """
var select = arguments[0];
var texts = [];
for (var i = 0; i < select.options.length; i++) {
  texts.push(select.options[i].text.trim());
}
return texts;
"""

FRAME_INDEX = (
    "return Array.prototype.indexOf.call("
    "document.querySelectorAll('iframe, frame'), arguments[0]);"
)
