"""
Translations

Key → localized string lookup with `{placeholder}` substitution.
Missing Urdu strings fall back to English; unknown keys fall back to the
key itself so a missing translation never breaks a flow.
"""

from typing import Union

from committee_manager.models.preferences import Language


TRANSLATIONS: dict[Language, dict[str, str]] = {
    Language.EN: {
        # Committee notifications
        "committeeCreatedTitle": "Committee created",
        "committeeCreatedMessage": "Committee \"{title}\" was created with {members} members.",
        "committeeDeletedTitle": "Committee deleted",
        "committeeDeletedMessage": "Committee \"{title}\" was deleted.",
        "memberAddedTitle": "Member added",
        "memberAddedMessage": "{memberName} joined \"{title}\".",
        "memberRemovedTitle": "Member removed",
        "memberRemovedMessage": "{memberName} was removed from \"{title}\".",
        "shareRemovedTitle": "Share removed",
        "shareRemovedMessage": "One share of {memberName} was removed from \"{title}\".",
        "paymentRecordedTitle": "Payment received",
        "paymentRecordedMessage": "{memberName} paid PKR {amount} to \"{title}\".",
        "payoutCompletedTitle": "Payout completed",
        "payoutCompletedMessage": "{memberName} received the payout of \"{title}\" for period {period}.",
        "durationOutOfRange": "Duration must be between 1 and {max} periods.",
        "tooManyShares": "A committee can have at most {max} shares.",
        # Alerts
        "paymentOverdueTitle": "Payment overdue",
        "paymentOverdueMessage": "{memberName} has paid PKR {paid} of PKR {expected} for period {period} of \"{title}\".",
        "payoutUpcomingTitle": "Upcoming payout",
        "payoutUpcomingMessage": "{memberName} is due to receive the payout of \"{title}\" on {date}.",
        # Installments
        "installmentPaymentTitle": "Installment payment received",
        "installmentPaymentMessage": "{buyerName} paid PKR {amount} for {item}.",
        "installmentClosedTitle": "Installment closed",
        "installmentClosedMessage": "{buyerName} has fully paid for {item}.",
        "amountMustBePositive": "Amount must be greater than zero.",
        "amountExceedsBalance": "Amount exceeds the remaining balance of PKR {remaining}.",
        # Payments
        "maxInstallmentReached": "Cannot add installment. Total payments for this month would exceed the amount per member (PKR {amount}). Maximum allowed for this installment: PKR {maxAllowed}.",
        # Security
        "pinDigitsOnly": "PIN must contain only digits.",
        "pinMismatch": "PINs do not match.",
        "passwordMismatch": "Passwords do not match.",
        "pinWrongLength": "PIN must be exactly {length} digits.",
        "passwordTooShort": "Password must be at least 6 characters.",
        "pinChangedSuccessfully": "PIN changed successfully.",
        "passwordChangedSuccessfully": "Password changed successfully.",
        "currentPinIncorrect": "Current PIN is incorrect.",
        "currentPasswordIncorrect": "Current password is incorrect.",
        "genericError": "An error occurred. Please try again.",
        "appSettingsSaved": "App settings saved.",
        "errorSavingSettings": "Error saving settings.",
        # Data management
        "restoreSuccess": "Data restored successfully.",
        "restoreInvalidFile": "Invalid backup file.",
        "restoreMissingKey": "Invalid backup file: \"{field}\" is missing.",
        "restoreFailed": "Restore failed. Please try again.",
        "resetSuccess": "All committee and member data was deleted.",
        "resetFailed": "Reset failed. Please try again.",
        # AI
        "summaryUnavailable": "Committee \"{title}\" has {members} members; {pending} have not paid this period.",
        "reminderLate": "Dear {memberName}, your committee installment is overdue. Please pay at your earliest convenience.",
        "reminderDue": "Dear {memberName}, your committee installment is due soon.",
        "unknownMember": "Unknown Member",
    },
    Language.UR: {
        "committeeCreatedTitle": "کمیٹی بنائی گئی",
        "committeeDeletedTitle": "کمیٹی حذف کر دی گئی",
        "committeeDeletedMessage": "کمیٹی \"{title}\" حذف کر دی گئی۔",
        "memberAddedTitle": "رکن شامل کیا گیا",
        "memberRemovedTitle": "رکن ہٹا دیا گیا",
        "paymentRecordedTitle": "ادائیگی موصول ہوئی",
        "paymentRecordedMessage": "{memberName} نے \"{title}\" میں PKR {amount} ادا کیے۔",
        "payoutCompletedTitle": "ادائیگی مکمل",
        "paymentOverdueTitle": "ادائیگی میں تاخیر",
        "payoutUpcomingTitle": "آنے والی ادائیگی",
        "installmentPaymentTitle": "قسط موصول ہوئی",
        "installmentClosedTitle": "قسط مکمل",
        "amountExceedsBalance": "رقم باقی رقم PKR {remaining} سے زیادہ ہے۔",
        "maxInstallmentReached": "قسط شامل نہیں کی جا سکتی۔ اس ماہ کی کل ادائیگیاں فی رکن رقم (PKR {amount}) سے تجاوز کر جائیں گی۔ اس قسط کے لیے زیادہ سے زیادہ قابل اجازت رقم: PKR {maxAllowed}۔",
        "pinDigitsOnly": "پن صرف نمبروں پر مشتمل ہونا چاہیے۔",
        "pinMismatch": "پن مماثل نہیں ہیں۔",
        "passwordMismatch": "پاس ورڈ مماثل نہیں ہیں۔",
        "pinWrongLength": "پن {length} ہندسوں کا ہونا چاہیے۔",
        "passwordTooShort": "پاس ورڈ کم از کم 6 حروف کا ہونا چاہیے۔",
        "pinChangedSuccessfully": "پن کامیابی سے تبدیل ہو گیا۔",
        "passwordChangedSuccessfully": "پاس ورڈ کامیابی سے تبدیل ہو گیا۔",
        "currentPinIncorrect": "موجودہ پن درست نہیں ہے۔",
        "currentPasswordIncorrect": "موجودہ پاس ورڈ درست نہیں ہے۔",
        "genericError": "کوئی خرابی پیش آگئی۔ دوبارہ کوشش کریں۔",
        "appSettingsSaved": "ایپ کی ترتیبات محفوظ کر دی گئیں۔",
        "errorSavingSettings": "ترتیبات محفوظ کرنے میں خرابی۔",
        "restoreInvalidFile": "غلط بیک اپ فائل۔",
        "reminderLate": "محترم {memberName}، آپ کی کمیٹی کی قسط میں تاخیر ہو گئی ہے۔ براہ کرم جلد ادائیگی کریں۔",
        "reminderDue": "محترم {memberName}، آپ کی کمیٹی کی قسط جلد واجب الادا ہے۔",
        "unknownMember": "نامعلوم رکن",
    },
}


def translate(
    key: str,
    language: Language = Language.EN,
    **substitutions: Union[str, int, float, object],
) -> str:
    """
    Look up a localized string and fill its placeholders.

    Example:
        translate("pinWrongLength", Language.EN, length=6)
        -> "PIN must be exactly 6 digits."
    """
    text = (
        TRANSLATIONS.get(language, {}).get(key)
        or TRANSLATIONS[Language.EN].get(key)
        or key
    )
    for name, value in substitutions.items():
        text = text.replace(f"{{{name}}}", str(value))
    return text
